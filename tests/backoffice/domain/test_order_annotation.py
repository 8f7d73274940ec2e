"""Tests for per-order list annotations."""

from backoffice.inventory.risk import InventoryTier, StockLevel, StockSnapshot
from backoffice.order.annotation import annotate_orders
from backoffice.shipping.weight import WeightSource


class TestAnnotateOrders:
    def test_weight_and_inventory_per_order(self, order_factory):
        first, second = order_factory("ord-1"), order_factory("ord-2")
        snapshots = {"ord-1": StockSnapshot(levels=[StockLevel(product_id="prod-1", quantity=30)])}

        annotations = annotate_orders([first, second], snapshots, threshold=5)

        assert set(annotations) == {"ord-1", "ord-2"}
        assert annotations["ord-1"].weight.weight_oz == 24.0
        assert annotations["ord-1"].weight.source == WeightSource.PRODUCT_DATA
        assert annotations["ord-1"].inventory.has_issues is False
        assert annotations["ord-2"].inventory.rollup.worst_tier == InventoryTier.CRITICAL

    def test_no_orders(self):
        assert annotate_orders([], {}) == {}
