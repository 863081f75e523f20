# cartsync/services/cart_backends.py
import secrets
from abc import ABC, abstractmethod

from cartsync.domain.errors import CartApiError, CartRefreshError
from cartsync.domain.schemas import CartLine, CartLineIn, CartState
from cartsync.services.cart_client import RemoteCartClient
from cartsync.utils.logging import get_logger

logger = get_logger(__name__)


def new_line_id() -> str:
    return secrets.token_hex(4)


class CartBackend(ABC):
    """
    One way of applying cart commands.
    Every method takes the current state and returns the next one, or raises CartError.
    """

    @abstractmethod
    def add(self, state: CartState, line: CartLineIn) -> CartState: ...

    @abstractmethod
    def remove(self, state: CartState, line_id: str) -> CartState: ...

    @abstractmethod
    def set_quantity(self, state: CartState, line_id: str, quantity: int) -> CartState: ...

    @abstractmethod
    def clear(self, state: CartState) -> CartState: ...

    @abstractmethod
    def fetch(self, state: CartState) -> CartState: ...

    def close(self) -> None:
        pass


class GuestCartStrategy(CartBackend):
    """Cart kept only on the client, total recomputed after every change."""

    def add(self, state: CartState, line: CartLineIn) -> CartState:
        existing = next((i for i in state.items if i.key == line.key), None)

        if existing:
            logger.info(
                f"Product {line.product_id} already in guest cart, quantity "
                f"{existing.quantity} -> {existing.quantity + line.quantity}"
            )
            items = [
                i.model_copy(update={"quantity": i.quantity + line.quantity}) if i.id == existing.id else i
                for i in state.items
            ]
        else:
            logger.info(f"Adding product {line.product_id} to guest cart")
            items = [*state.items, CartLine(id=new_line_id(), **line.model_dump())]

        return CartState.from_items(items)

    def remove(self, state: CartState, line_id: str) -> CartState:
        return CartState.from_items([i for i in state.items if i.id != line_id])

    def set_quantity(self, state: CartState, line_id: str, quantity: int) -> CartState:
        items = [
            i.model_copy(update={"quantity": quantity}) if i.id == line_id else i
            for i in state.items
        ]
        return CartState.from_items(items)

    def clear(self, state: CartState) -> CartState:
        return CartState()

    def fetch(self, state: CartState) -> CartState:
        return state


class RemoteCartStrategy(CartBackend):
    """
    Cart owned by the remote service.
    Each command is sent first, then the whole cart is fetched again and replaces local state.
    """

    def __init__(self, client: RemoteCartClient):
        self.client = client

    def add(self, state: CartState, line: CartLineIn) -> CartState:
        self.client.add_item(line.product_id, line.variant_id, line.quantity)
        return self._refresh(state)

    def remove(self, state: CartState, line_id: str) -> CartState:
        self.client.remove_item(line_id)
        return self._refresh(state)

    def set_quantity(self, state: CartState, line_id: str, quantity: int) -> CartState:
        self.client.update_item(line_id, quantity)
        return self._refresh(state)

    def clear(self, state: CartState) -> CartState:
        self.client.clear_cart()
        return self._refresh(state)

    def _refresh(self, state: CartState) -> CartState:
        try:
            return self.fetch(state)
        except CartApiError as e:
            raise CartRefreshError(str(e), status_code=e.status_code) from e

    def fetch(self, state: CartState) -> CartState:
        remote = self.client.get_cart()
        logger.info(f"Fetched remote cart with {len(remote.items)} lines")
        return remote.to_state()

    def close(self) -> None:
        self.client.close()
