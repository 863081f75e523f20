#cartsync/data/models/cart.py
from sqlalchemy import Column, String
from sqlalchemy.orm import relationship
from cartsync.data.database import Base


class CartSnapshotModel(Base):
    __tablename__ = "cart_snapshots"

    name = Column(String, primary_key=True)
    #str(Decimal), kept exact
    total = Column(String, nullable=False, default="0")

    lines = relationship(
        "CartLineModel",
        back_populates="snapshot",
        cascade="all, delete-orphan",
        order_by="CartLineModel.position",
    )
