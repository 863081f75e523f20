# cartsync/main.py
from cartsync.repos.storage import CartStorage, create_storage
from cartsync.services.auth_session import AuthSession
from cartsync.services.cart_backends import GuestCartStrategy, RemoteCartStrategy
from cartsync.services.cart_client import RemoteCartClient
from cartsync.services.cart_store import CartStore
from cartsync.utils.settings import API_URL, CART_STORAGE_NAME, CART_STORAGE_URL
from cartsync.utils.logging import get_logger

logger = get_logger(__name__)


def create_store(
    session: AuthSession | None = None,
    client: RemoteCartClient | None = None,
    storage: CartStorage | None = None,
) -> CartStore:
    """
    Build a cart store from settings and restore the persisted cart.
    The caller owns the store and has to close() it on shutdown.
    """
    session = session or AuthSession()
    client = client or RemoteCartClient(session, base_url=API_URL)
    storage = storage or create_storage(CART_STORAGE_URL, CART_STORAGE_NAME)

    store = CartStore(
        session=session,
        guest_backend=GuestCartStrategy(),
        remote_backend=RemoteCartStrategy(client),
        storage=storage,
    )
    logger.info(f"Cart store created (api={client.base_url}, storage={type(storage).__name__})")
    return store.open()
