"""Tests for the collaborator adapters and their registries."""

import pytest

from backoffice.errors import OrderNotFoundError, StockLookupError
from backoffice.export import get_exporter, reset_exporter
from backoffice.export.csv_adapter import CsvExporter
from backoffice.notifier import get_notifier, reset_notifier
from backoffice.notifier.fake_adapter import FakeNotifier
from backoffice.order.order import OrderItem, OrderStatus
from backoffice.stock import get_stock_lookup, reset_stock_lookup
from backoffice.stock.memory_adapter import InMemoryStockLookup
from backoffice.store import get_order_store, reset_order_store
from backoffice.store.memory_adapter import InMemoryOrderStore


class TestRegistries:
    def test_defaults(self):
        assert isinstance(get_order_store(), InMemoryOrderStore)
        assert isinstance(get_stock_lookup(), InMemoryStockLookup)
        assert isinstance(get_exporter(), CsvExporter)
        assert isinstance(get_notifier(), FakeNotifier)

    def test_singletons(self):
        assert get_order_store() is get_order_store()
        assert get_notifier() is get_notifier()

    def test_reset_gives_new_instances(self):
        store, stock, exporter, notifier = get_order_store(), get_stock_lookup(), get_exporter(), get_notifier()
        reset_order_store()
        reset_stock_lookup()
        reset_exporter()
        reset_notifier()
        assert get_order_store() is not store
        assert get_stock_lookup() is not stock
        assert get_exporter() is not exporter
        assert get_notifier() is not notifier

    @pytest.mark.parametrize(
        "env, accessor",
        [
            ("BACKOFFICE_ORDER_STORE_ADAPTER", get_order_store),
            ("BACKOFFICE_STOCK_ADAPTER", get_stock_lookup),
            ("BACKOFFICE_EXPORT_ADAPTER", get_exporter),
            ("BACKOFFICE_NOTIFIER_ADAPTER", get_notifier),
        ],
    )
    def test_unknown_adapter(self, monkeypatch, env, accessor):
        from backoffice.config import reset_settings

        monkeypatch.setenv(env, "carrier-pigeon")
        reset_settings()
        with pytest.raises(ValueError, match="carrier-pigeon"):
            accessor()


class TestInMemoryOrderStore:
    def test_list_oldest_first_and_by_status(self, order_factory):
        from datetime import UTC, datetime

        newer = order_factory("ord-2", created_at=datetime(2024, 5, 1, tzinfo=UTC))
        older = order_factory("ord-1", status=OrderStatus.PENDING, created_at=datetime(2024, 4, 1, tzinfo=UTC))
        store = InMemoryOrderStore([newer, older])
        assert [o.id for o in store.list_orders()] == ["ord-1", "ord-2"]
        assert [o.id for o in store.list_orders([OrderStatus.PENDING])] == ["ord-1"]

    def test_get_missing(self):
        with pytest.raises(OrderNotFoundError, match='Order "x" not found'):
            InMemoryOrderStore().get_order("x")

    def test_find_by_number(self, order_factory):
        store = InMemoryOrderStore([order_factory("ord-7")])
        assert store.find_by_number("#7").id == "ord-7"
        assert store.find_by_number("ord-7").id == "ord-7"

    def test_update_rejects_unknown_fields(self, order_factory):
        store = InMemoryOrderStore([order_factory("ord-1")])
        result = store.update_order("ord-1", {"total": 0})
        assert result["updated"] is False
        assert "total" in result["error"]

    def test_update_records_writes(self, order_factory):
        store = InMemoryOrderStore([order_factory("ord-1")])
        assert store.update_order("ord-1", {"notes": "fragile"}) == {"updated": True}
        assert store.get_order("ord-1").notes == "fragile"
        assert store.updates == [("ord-1", {"notes": "fragile"})]


class TestInMemoryStockLookup:
    def test_snapshot_holds_only_order_products(self, order_store, stock_lookup, order_factory):
        order_store.add(order_factory("ord-1"))
        stock_lookup.set_level("prod-1", 7)
        stock_lookup.set_level("prod-unrelated", 3)
        snapshot = stock_lookup.stock_for_order("ord-1")
        assert [level.product_id for level in snapshot.levels] == ["prod-1"]

    def test_variant_and_product_levels(self, order_store, stock_lookup, order_factory):
        order_store.add(order_factory("ord-1", items=[OrderItem(product_id="p", variant_id="v", quantity=1)]))
        stock_lookup.set_level("p", 10)
        stock_lookup.set_level("p", 1, variant_id="v")
        assert stock_lookup.stock_for_order("ord-1").lookup("p", "v").quantity == 1

    def test_unavailable_order(self, order_store, stock_lookup, order_factory):
        order_store.add(order_factory("ord-1"))
        order_store.add(order_factory("ord-2"))
        stock_lookup.make_unavailable("ord-1")
        with pytest.raises(StockLookupError):
            stock_lookup.stock_for_order("ord-1")
        assert set(stock_lookup.stock_for_orders(["ord-1", "ord-2", "ghost"])) == {"ord-2"}


class TestFakeNotifier:
    def test_records_and_resets(self):
        notifier = FakeNotifier()
        result = notifier.notify("ord-1", "shipped")
        assert result["status"] == "queued"
        assert result["notification_id"].startswith("ntf-")
        notifier.configure(should_succeed=False, failure_reason="quota")
        assert notifier.notify("ord-2", "shipped") == {"notification_id": None, "status": "failed", "error": "quota"}
        notifier.reset()
        assert notifier.sent == []
        assert notifier.should_succeed is True
