# cartsync/repos/storage.py
from abc import ABC, abstractmethod

from cartsync.domain.schemas import CartState


class CartStorage(ABC):
    """Durable client side copy of the cart (items and total only)."""

    @abstractmethod
    def load(self) -> CartState | None: ...

    @abstractmethod
    def save(self, state: CartState) -> None: ...

    def close(self) -> None:
        pass


def create_storage(url: str, name: str) -> CartStorage:
    if url.startswith(("redis://", "rediss://")):
        from cartsync.repos.redis_cart_repo import RedisCartStorage
        return RedisCartStorage(name=name, url=url)

    from cartsync.repos.cart_repo import SqlCartStorage
    return SqlCartStorage(name=name, url=url)
