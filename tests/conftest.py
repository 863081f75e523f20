"""
Shared fixtures.

The remote cart service runs in process (FastAPI TestClient) and is handed to the
RemoteCartClient as its HTTP session, so remote tests go through real routing,
validation and status codes without a network.
"""
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from cartsync.domain.schemas import CartLineIn, CartState
from cartsync.remote_service.main import create_app
from cartsync.repos.storage import CartStorage
from cartsync.services.auth_session import AuthSession
from cartsync.services.cart_backends import GuestCartStrategy, RemoteCartStrategy
from cartsync.services.cart_client import RemoteCartClient
from cartsync.services.cart_store import CartStore

BASE_URL = "http://testserver/api"


class MemoryCartStorage(CartStorage):
    def __init__(self, initial: CartState | None = None):
        self.saved = initial
        self.save_calls = 0
        self.closed = False

    def load(self):
        return self.saved

    def save(self, state):
        self.saved = state
        self.save_calls += 1

    def close(self):
        self.closed = True


def make_line(product_id="p1", variant_id=None, quantity=1, price="10", title="Product", image=None):
    return CartLineIn(
        product_id=product_id,
        variant_id=variant_id,
        title=title,
        price=Decimal(price),
        quantity=quantity,
        image=image,
    )


@pytest.fixture
def line():
    return make_line


@pytest.fixture
def session():
    return AuthSession()


@pytest.fixture
def logged_in(session):
    session.login({"id": "user-1", "email": "alice@example.com"}, "token-alice")
    return session


@pytest.fixture
def storage():
    return MemoryCartStorage()


@pytest.fixture
def remote_app():
    return create_app()


@pytest.fixture
def test_client(remote_app):
    return TestClient(remote_app)


@pytest.fixture
def client(session, test_client):
    return RemoteCartClient(session, base_url=BASE_URL, http=test_client)


@pytest.fixture
def store(session, client, storage):
    cart_store = CartStore(
        session=session,
        guest_backend=GuestCartStrategy(),
        remote_backend=RemoteCartStrategy(client),
        storage=storage,
    )
    with cart_store:
        yield cart_store
