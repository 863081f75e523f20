# cartsync/repos/cart_repo.py
from decimal import Decimal

from sqlalchemy import delete
from sqlalchemy.exc import SQLAlchemyError

from cartsync.data.database import make_session_factory
from cartsync.data.models.cart import CartSnapshotModel
from cartsync.data.models.cart_item import CartLineModel
from cartsync.domain.errors import CartStorageError
from cartsync.domain.schemas import CartLine, CartState
from cartsync.repos.storage import CartStorage
from cartsync.utils.logging import get_logger

logger = get_logger(__name__)


class SqlCartStorage(CartStorage):
    """Cart snapshot in a relational database, sqlite file by default."""

    def __init__(self, name: str, url: str):
        self.name = name
        self.engine, self.SessionLocal = make_session_factory(url)

    def load(self) -> CartState | None:
        db = self.SessionLocal()
        try:
            snapshot = db.get(CartSnapshotModel, self.name)
            if not snapshot:
                return None

            items = [
                CartLine(
                    id=line.line_id,
                    product_id=line.product_id,
                    variant_id=line.variant_id,
                    title=line.title,
                    price=Decimal(line.price),
                    quantity=line.quantity,
                    image=line.image,
                )
                for line in snapshot.lines
            ]
            logger.info(f"Loaded cart snapshot {self.name} with {len(items)} lines")
            return CartState(items=items, total=Decimal(snapshot.total))
        except SQLAlchemyError as e:
            raise CartStorageError(f"Could not load cart snapshot {self.name}: {e}") from e
        finally:
            db.close()

    def save(self, state: CartState) -> None:
        db = self.SessionLocal()
        try:
            snapshot = db.get(CartSnapshotModel, self.name)
            if not snapshot:
                snapshot = CartSnapshotModel(name=self.name)
                db.add(snapshot)

            #snapshot is replaced as a whole, lines are not diffed
            db.execute(delete(CartLineModel).where(CartLineModel.snapshot_name == self.name))
            snapshot.total = str(state.total)
            db.add_all(
                CartLineModel(
                    snapshot_name=self.name,
                    position=pos,
                    line_id=i.id,
                    product_id=i.product_id,
                    variant_id=i.variant_id,
                    title=i.title,
                    price=str(i.price),
                    quantity=i.quantity,
                    image=i.image,
                )
                for pos, i in enumerate(state.items)
            )
            db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise CartStorageError(f"Could not save cart snapshot {self.name}: {e}") from e
        finally:
            db.close()

    def close(self) -> None:
        self.engine.dispose()
