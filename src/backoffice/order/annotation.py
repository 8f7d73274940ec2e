"""Per-order weight and inventory annotations for list views."""

from collections.abc import Iterable, Mapping

from pydantic import BaseModel, ConfigDict

from backoffice.inventory.risk import InventoryReport, StockSnapshot, check_order
from backoffice.order.order import Order
from backoffice.shipping.weight import WeightEstimate, estimate_weight


class OrderAnnotation(BaseModel):
    model_config = ConfigDict(frozen=True)

    weight: WeightEstimate
    inventory: InventoryReport


def annotate_order(order: Order, snapshot: StockSnapshot | None, threshold: int | None = None) -> OrderAnnotation:
    return OrderAnnotation(
        weight=estimate_weight(order.items),
        inventory=check_order(order, snapshot, threshold=threshold),
    )


def annotate_orders(
    orders: Iterable[Order],
    snapshots: Mapping[str, StockSnapshot],
    threshold: int | None = None,
) -> dict[str, OrderAnnotation]:
    """Annotations keyed by order id; orders without a snapshot are all-critical."""
    return {order.id: annotate_order(order, snapshots.get(order.id), threshold) for order in orders}
