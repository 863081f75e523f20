#cartsync/data/models/cart_item.py
from sqlalchemy import Column, Integer, ForeignKey, String
from sqlalchemy.orm import relationship
from cartsync.data.database import Base


class CartLineModel(Base):
    __tablename__ = "cart_lines"

    pk = Column(Integer, primary_key=True)
    snapshot_name = Column(String, ForeignKey("cart_snapshots.name", ondelete="CASCADE"), nullable=False)
    position = Column(Integer, nullable=False)

    line_id = Column(String, nullable=False)
    product_id = Column(String, nullable=False)
    variant_id = Column(String, nullable=True)
    title = Column(String, nullable=False)
    price = Column(String, nullable=False)
    quantity = Column(Integer, nullable=False)
    image = Column(String, nullable=True)

    snapshot = relationship("CartSnapshotModel", back_populates="lines")
