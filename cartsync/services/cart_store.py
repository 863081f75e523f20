# cartsync/services/cart_store.py
from typing import Callable, List

from cartsync.domain.errors import CartError, CartStorageError, InvalidQuantityError
from cartsync.domain.schemas import CartLine, CartLineIn, CartResult, CartState
from cartsync.repos.storage import CartStorage
from cartsync.services.auth_session import AuthSession
from cartsync.services.cart_backends import CartBackend
from cartsync.utils.logging import get_logger

logger = get_logger(__name__)

Listener = Callable[[CartState], None]


class CartStore:
    """
    Owner of the in-progress cart.

    Backend is picked on every call from session.is_authenticated:
    - authenticated: remote backend, local state is replaced by what the server returns
    - guest: guest backend, local state only
    A failed remote call leaves the state as it was, there is no fallback to the guest path.

    Commands never raise, they return CartResult.
    Only items and total are persisted.
    """

    def __init__(
        self,
        session: AuthSession,
        guest_backend: CartBackend,
        remote_backend: CartBackend,
        storage: CartStorage,
    ):
        self.session = session
        self.guest_backend = guest_backend
        self.remote_backend = remote_backend
        self.storage = storage
        self._state = CartState()
        self._listeners: List[Listener] = []
        self._opened = False

    # lifecycle
    def open(self) -> "CartStore":
        try:
            persisted = self.storage.load()
        except CartStorageError as e:
            logger.error(f"Could not restore cart, starting empty: {e}")
            persisted = None

        if persisted is not None:
            self._state = persisted
            logger.info(f"Restored cart with {len(persisted.items)} lines")

        self._opened = True
        return self

    def close(self) -> None:
        if not self._opened:
            return
        self._listeners.clear()
        self.guest_backend.close()
        self.remote_backend.close()
        self.storage.close()
        self._opened = False

    def __enter__(self) -> "CartStore":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    # read model
    @property
    def state(self) -> CartState:
        return self._state

    @property
    def items(self) -> List[CartLine]:
        return list(self._state.items)

    @property
    def total(self):
        return self._state.total

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    # commands
    def add_item(self, line: CartLineIn) -> CartResult:
        return self._run("add_item", lambda backend: backend.add(self._state, line))

    def remove_item(self, line_id: str) -> CartResult:
        return self._run("remove_item", lambda backend: backend.remove(self._state, line_id))

    def update_quantity(self, line_id: str, quantity: int) -> CartResult:
        #0 removes the line, negative is rejected
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 0:
            e = InvalidQuantityError(f"Quantity must be a non-negative integer, got {quantity!r}")
            logger.error(f"update_quantity rejected for line {line_id}: {e}")
            return CartResult.failure(self._state, e.reason, str(e))

        if quantity == 0:
            return self.remove_item(line_id)

        return self._run(
            "update_quantity",
            lambda backend: backend.set_quantity(self._state, line_id, quantity),
        )

    def clear_cart(self) -> CartResult:
        return self._run("clear_cart", lambda backend: backend.clear(self._state))

    def fetch_cart(self) -> CartResult:
        if not self.session.is_authenticated:
            return CartResult.success(self._state, reason="guest_session")
        return self._run("fetch_cart", lambda backend: backend.fetch(self._state))

    # internals
    def _backend(self) -> CartBackend:
        if self.session.is_authenticated:
            return self.remote_backend
        return self.guest_backend

    def _run(self, operation: str, command: Callable[[CartBackend], CartState]) -> CartResult:
        backend = self._backend()
        mode = "remote" if backend is self.remote_backend else "guest"

        try:
            new_state = command(backend)
        except CartError as e:
            logger.error(f"{operation} failed ({mode}): {e}")
            return CartResult.failure(self._state, e.reason, str(e))
        except Exception as e:
            logger.exception(f"{operation} failed unexpectedly ({mode})")
            return CartResult.failure(self._state, "unexpected_error", str(e))

        self._commit(new_state)
        return CartResult.success(self._state)

    def _commit(self, new_state: CartState) -> None:
        self._state = new_state

        try:
            self.storage.save(new_state)
        except CartStorageError as e:
            logger.error(f"Cart state not persisted: {e}")

        for listener in list(self._listeners):
            try:
                listener(new_state)
            except Exception:
                logger.exception("Cart listener failed")
