#import all models so SQLAlchemy registers them in Base.metadata
from cartsync.data.models.cart import CartSnapshotModel
from cartsync.data.models.cart_item import CartLineModel

__all__ = ["CartSnapshotModel", "CartLineModel"]
