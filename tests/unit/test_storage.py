"""
Cart persistence: SQL and Redis snapshot storages, and store rehydration.
"""
from decimal import Decimal
from unittest.mock import MagicMock

import pytest
from redis.exceptions import RedisError

from cartsync.domain.errors import CartStorageError
from cartsync.domain.schemas import CartLine, CartState
from cartsync.repos.cart_repo import SqlCartStorage
from cartsync.repos.redis_cart_repo import RedisCartStorage
from cartsync.repos.storage import create_storage
from cartsync.services.cart_backends import GuestCartStrategy, RemoteCartStrategy
from cartsync.services.cart_store import CartStore
from tests.conftest import MemoryCartStorage, make_line


def sample_state():
    items = [
        CartLine(id="a1", product_id="p1", variant_id="red", title="Shirt", price=Decimal("19.99"), quantity=2,
                 image="https://cdn/shirt.jpg"),
        CartLine(id="b2", product_id="p2", title="Mug", price=Decimal("7.50"), quantity=1),
    ]
    return CartState.from_items(items)


@pytest.fixture
def sql_url(tmp_path):
    return f"sqlite:///{tmp_path / 'cart.db'}"


class TestSqlCartStorage:

    def test_empty_storage_loads_none(self, sql_url):
        storage = SqlCartStorage("ecommerce-cart", sql_url)

        assert storage.load() is None
        storage.close()

    def test_save_and_load_keep_lines_in_order(self, sql_url):
        storage = SqlCartStorage("ecommerce-cart", sql_url)
        storage.save(sample_state())
        storage.close()

        loaded = SqlCartStorage("ecommerce-cart", sql_url).load()

        assert [i.id for i in loaded.items] == ["a1", "b2"]
        assert loaded.items[0].variant_id == "red"
        assert loaded.items[0].price == Decimal("19.99")
        assert loaded.items[1].image is None
        assert loaded.total == Decimal("47.48")

    def test_save_replaces_previous_snapshot(self, sql_url):
        storage = SqlCartStorage("ecommerce-cart", sql_url)
        storage.save(sample_state())

        storage.save(CartState())

        loaded = storage.load()
        assert loaded.items == []
        assert loaded.total == 0

    def test_prices_are_kept_exact(self, sql_url):
        line = CartLine(id="c3", product_id="p1", price=Decimal("0.125"), quantity=3)
        storage = SqlCartStorage("ecommerce-cart", sql_url)
        storage.save(CartState.from_items([line]))
        storage.close()

        loaded = SqlCartStorage("ecommerce-cart", sql_url).load()

        assert loaded.items[0].price == Decimal("0.125")
        assert loaded.total == Decimal("0.375")

    def test_snapshots_are_keyed_by_name(self, sql_url):
        first = SqlCartStorage("cart-a", sql_url)
        second = SqlCartStorage("cart-b", sql_url)
        first.save(sample_state())

        assert second.load() is None


class TestRedisCartStorage:

    def test_save_writes_json_document(self):
        client = MagicMock()
        storage = RedisCartStorage("ecommerce-cart", client=client)

        storage.save(sample_state())

        key, value = client.set.call_args.args
        assert key == "cart:ecommerce-cart"
        assert CartState.model_validate_json(value) == sample_state()

    def test_load(self):
        client = MagicMock()
        client.get.return_value = sample_state().model_dump_json()

        loaded = RedisCartStorage("ecommerce-cart", client=client).load()

        assert loaded == sample_state()

    def test_load_missing_and_corrupted(self):
        client = MagicMock()
        storage = RedisCartStorage("ecommerce-cart", client=client)

        client.get.return_value = None
        assert storage.load() is None

        client.get.return_value = "{not json"
        assert storage.load() is None

    def test_redis_errors_become_storage_errors(self, monkeypatch):
        monkeypatch.setattr("time.sleep", lambda s: None)
        client = MagicMock()
        client.set.side_effect = RedisError("down")

        with pytest.raises(CartStorageError):
            RedisCartStorage("ecommerce-cart", client=client).save(CartState())

        assert client.set.call_count == 3


class TestCreateStorage:

    def test_redis_url(self, monkeypatch):
        from_url = MagicMock()
        monkeypatch.setattr("redis.Redis.from_url", from_url)

        storage = create_storage("redis://localhost:6379/0", "ecommerce-cart")

        assert isinstance(storage, RedisCartStorage)
        from_url.assert_called_once_with("redis://localhost:6379/0", decode_responses=True)

    def test_sql_url(self, sql_url):
        assert isinstance(create_storage(sql_url, "ecommerce-cart"), SqlCartStorage)


class TestStorePersistence:

    def make_store(self, session, storage):
        return CartStore(
            session=session,
            guest_backend=GuestCartStrategy(),
            remote_backend=RemoteCartStrategy(MagicMock()),
            storage=storage,
        )

    def test_guest_cart_survives_reload(self, session, sql_url):
        with self.make_store(session, SqlCartStorage("ecommerce-cart", sql_url)) as store:
            store.add_item(make_line("p1", quantity=2, price="10"))
            store.add_item(make_line("p2", price="1.25"))

        with self.make_store(session, SqlCartStorage("ecommerce-cart", sql_url)) as reloaded:
            assert [(i.product_id, i.quantity) for i in reloaded.items] == [("p1", 2), ("p2", 1)]
            assert reloaded.total == Decimal("21.25")

    def test_reloaded_total_matches_lines(self, session, sql_url):
        with self.make_store(session, SqlCartStorage("ecommerce-cart", sql_url)) as store:
            store.add_item(make_line("p1", quantity=3, price="0.125"))
            store.add_item(make_line("p2", quantity=7, price="1.0001"))
            before = store.state

        with self.make_store(session, SqlCartStorage("ecommerce-cart", sql_url)) as reloaded:
            assert reloaded.state == before
            assert reloaded.total == sum(i.price * i.quantity for i in reloaded.items)
            assert reloaded.total == Decimal("7.3757")

    def test_every_change_is_saved(self, session, storage):
        with self.make_store(session, storage) as store:
            store.add_item(make_line("p1"))
            store.update_quantity(store.items[0].id, 3)
            store.clear_cart()

        assert storage.save_calls == 3
        assert storage.saved == CartState()
        assert storage.closed

    def test_storage_failure_does_not_fail_command(self, session):
        storage = MemoryCartStorage()
        storage.save = MagicMock(side_effect=CartStorageError("disk full"))

        with self.make_store(session, storage) as store:
            result = store.add_item(make_line("p1"))

            assert result.ok
            assert len(store.items) == 1

    def test_unreadable_storage_starts_empty(self, session):
        storage = MemoryCartStorage()
        storage.load = MagicMock(side_effect=CartStorageError("corrupt"))

        with self.make_store(session, storage) as store:
            assert store.items == []
