from cartsync.domain.schemas import CartLine, CartLineIn, CartResult, CartState
from cartsync.main import create_store
from cartsync.services.auth_session import AuthSession
from cartsync.services.cart_store import CartStore

__all__ = [
    "AuthSession",
    "CartLine",
    "CartLineIn",
    "CartResult",
    "CartState",
    "CartStore",
    "create_store",
]
