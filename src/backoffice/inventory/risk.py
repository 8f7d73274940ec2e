"""Inventory risk classification.

Compares what an order needs against current stock, item by item:

    critical  ordered quantity exceeds stock, or no stock data exists
    low       stock is below the low threshold but still covers the order
    ok        otherwise
"""

from collections.abc import Iterable, Mapping
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field

from backoffice.config import get_settings
from backoffice.order.order import Order, OrderItem

UNKNOWN_PRODUCT_TITLE = "Unknown Product"


class InventoryTier(str, Enum):
    CRITICAL = "critical"
    LOW = "low"
    OK = "ok"


# ---------------------------------------------------------------------------
# Stock data
# ---------------------------------------------------------------------------
class StockLevel(BaseModel):
    """Units available for a product, or for one of its variants."""

    model_config = ConfigDict(frozen=True)

    product_id: str
    variant_id: str | None = None
    quantity: int
    product_title: str | None = None
    variant_title: str | None = None


class StockSnapshot(BaseModel):
    """Stock levels relevant to one order, as returned by the stock lookup."""

    model_config = ConfigDict(frozen=True)

    levels: list[StockLevel] = Field(default_factory=list)

    def lookup(self, product_id: str, variant_id: str | None = None) -> StockLevel | None:
        """Find the level for a product/variant.

        A variant-specific level wins; otherwise the product-level record
        (one without a variant id) is used.
        """
        if variant_id is not None:
            for level in self.levels:
                if level.product_id == product_id and level.variant_id == variant_id:
                    return level
        for level in self.levels:
            if level.product_id == product_id and level.variant_id is None:
                return level
        return None


# ---------------------------------------------------------------------------
# Results
# ---------------------------------------------------------------------------
class InventoryAlert(BaseModel):
    model_config = ConfigDict(frozen=True)

    product_id: str
    variant_id: str | None = None
    product_title: str
    variant_title: str | None = None
    current_stock: int | None
    ordered_quantity: int
    tier: InventoryTier


class InventoryRollup(BaseModel):
    """Per-tier counts for compact display."""

    model_config = ConfigDict(frozen=True)

    critical: int = 0
    low: int = 0
    ok: int = 0

    @property
    def total(self) -> int:
        return self.critical + self.low + self.ok

    @property
    def has_issues(self) -> bool:
        return self.critical > 0 or self.low > 0

    @property
    def worst_tier(self) -> InventoryTier:
        if self.critical:
            return InventoryTier.CRITICAL
        if self.low:
            return InventoryTier.LOW
        return InventoryTier.OK


class InventoryReport(BaseModel):
    model_config = ConfigDict(frozen=True)

    order_id: str | None = None
    alerts: list[InventoryAlert] = Field(default_factory=list)
    rollup: InventoryRollup = Field(default_factory=InventoryRollup)

    @property
    def has_issues(self) -> bool:
        return self.rollup.has_issues

    @property
    def issues(self) -> list[InventoryAlert]:
        return [a for a in self.alerts if a.tier != InventoryTier.OK]


class InventorySummary(BaseModel):
    """Totals across a batch inventory check."""

    model_config = ConfigDict(frozen=True)

    total_orders: int = 0
    orders_with_issues: int = 0
    critical: int = 0
    low: int = 0


# ---------------------------------------------------------------------------
# Classification
# ---------------------------------------------------------------------------
def classify(ordered: int, stock: int | None, threshold: int) -> InventoryTier:
    if stock is None or ordered > stock:
        return InventoryTier.CRITICAL
    if stock < threshold:
        return InventoryTier.LOW
    return InventoryTier.OK


def classify_item(item: OrderItem, level: StockLevel | None, threshold: int) -> InventoryAlert:
    stock = level.quantity if level is not None else None
    product_title = (level.product_title if level else None) or item.title or UNKNOWN_PRODUCT_TITLE
    return InventoryAlert(
        product_id=item.product_id,
        variant_id=item.variant_id,
        product_title=product_title,
        variant_title=level.variant_title if level else None,
        current_stock=stock,
        ordered_quantity=item.quantity,
        tier=classify(item.quantity, stock, threshold),
    )


def rollup(alerts: Iterable[InventoryAlert]) -> InventoryRollup:
    counts = {tier: 0 for tier in InventoryTier}
    for alert in alerts:
        counts[alert.tier] += 1
    return InventoryRollup(
        critical=counts[InventoryTier.CRITICAL],
        low=counts[InventoryTier.LOW],
        ok=counts[InventoryTier.OK],
    )


def check_items(
    items: Iterable[OrderItem],
    snapshot: StockSnapshot | None,
    threshold: int | None = None,
    order_id: str | None = None,
) -> InventoryReport:
    """Classify every item against a stock snapshot.

    A missing snapshot (the lookup failed) classifies every item as critical.
    """
    if threshold is None:
        threshold = get_settings().low_stock_threshold

    alerts = []
    for item in items:
        level = snapshot.lookup(item.product_id, item.variant_id) if snapshot is not None else None
        alerts.append(classify_item(item, level, threshold))

    return InventoryReport(order_id=order_id, alerts=alerts, rollup=rollup(alerts))


def check_order(order: Order, snapshot: StockSnapshot | None, threshold: int | None = None) -> InventoryReport:
    return check_items(order.items, snapshot, threshold=threshold, order_id=order.id)


def check_orders(
    orders: Iterable[Order],
    snapshots: Mapping[str, StockSnapshot],
    threshold: int | None = None,
) -> tuple[dict[str, InventoryReport], InventorySummary]:
    """Check many orders at once; orders absent from ``snapshots`` are all-critical."""
    reports: dict[str, InventoryReport] = {}
    for order in orders:
        reports[order.id] = check_order(order, snapshots.get(order.id), threshold=threshold)

    summary = InventorySummary(
        total_orders=len(reports),
        orders_with_issues=sum(1 for r in reports.values() if r.has_issues),
        critical=sum(r.rollup.critical for r in reports.values()),
        low=sum(r.rollup.low for r in reports.values()),
    )
    return reports, summary
