"""Order filter engine.

Narrows an order collection to those matching every supplied predicate.
Categories combine with AND; multi-valued categories (statuses, products)
match if any value does. Empty or unset criteria do not restrict. Filtering
never reorders its input.
"""

from collections import Counter
from collections.abc import Iterable, Mapping
from datetime import date, datetime, time, tzinfo

from pydantic import BaseModel, ConfigDict, Field, model_validator

from backoffice.config import get_settings
from backoffice.inventory.risk import InventoryRollup
from backoffice.order.order import Order, OrderStatus

# Inclusive end of a calendar day, millisecond precision
_END_OF_DAY = time(23, 59, 59, 999000)


class FilterCriteria(BaseModel):
    model_config = ConfigDict(frozen=True)

    search: str | None = None
    date_from: date | None = None
    date_to: date | None = None
    statuses: frozenset[OrderStatus] = Field(default_factory=frozenset)
    product_ids: frozenset[str] = Field(default_factory=frozenset)
    min_total: float | None = None
    max_total: float | None = None
    has_notes: bool = False
    low_inventory_only: bool = False

    @model_validator(mode="after")
    def check_ranges(self) -> "FilterCriteria":
        if self.date_from and self.date_to and self.date_from > self.date_to:
            raise ValueError("date_from must not be after date_to")
        if self.min_total is not None and self.max_total is not None and self.min_total > self.max_total:
            raise ValueError("min_total must not exceed max_total")
        return self

    @property
    def search_term(self) -> str:
        return (self.search or "").strip().lower()


def _local_day(created_at: datetime, tz: tzinfo) -> datetime:
    # Naive timestamps are already local
    if created_at.tzinfo is None:
        return created_at
    return created_at.astimezone(tz).replace(tzinfo=None)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------
def matches_search(order: Order, term: str) -> bool:
    if not term:
        return True
    haystacks = (order.order_number, order.customer_name, order.customer_email)
    return any(term in (value or "").lower() for value in haystacks)


def matches_dates(order: Order, date_from: date | None, date_to: date | None, tz: tzinfo) -> bool:
    if date_from is None and date_to is None:
        return True
    created = _local_day(order.created_at, tz)
    if date_from is not None and created < datetime.combine(date_from, time.min):
        return False
    if date_to is not None and created > datetime.combine(date_to, _END_OF_DAY):
        return False
    return True


def matches_status(order: Order, statuses: frozenset[OrderStatus]) -> bool:
    return not statuses or order.status in statuses


def matches_total(order: Order, min_total: float | None, max_total: float | None) -> bool:
    if min_total is not None and order.total < min_total:
        return False
    if max_total is not None and order.total > max_total:
        return False
    return True


def matches_products(order: Order, product_ids: frozenset[str]) -> bool:
    return not product_ids or not product_ids.isdisjoint(order.product_ids)


def matches_low_inventory(order: Order, rollups: Mapping[str, InventoryRollup]) -> bool:
    # No rollup means no stock data, which counts as an issue
    rollup = rollups.get(order.id)
    return rollup is None or rollup.has_issues


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------
def filter_orders(
    criteria: FilterCriteria,
    orders: Iterable[Order],
    rollups: Mapping[str, InventoryRollup] | None = None,
    tz: tzinfo | None = None,
) -> list[Order]:
    """Return the orders matching ``criteria``, in input order.

    ``rollups`` maps order id to its inventory rollup and is consulted only
    when ``low_inventory_only`` is set. ``tz`` defaults to the configured
    local timezone and decides which calendar day a timestamp falls on.
    """
    tz = tz or get_settings().tzinfo
    rollups = rollups or {}
    term = criteria.search_term

    def keep(order: Order) -> bool:
        return (
            matches_search(order, term)
            and matches_dates(order, criteria.date_from, criteria.date_to, tz)
            and matches_status(order, criteria.statuses)
            and matches_total(order, criteria.min_total, criteria.max_total)
            and matches_products(order, criteria.product_ids)
            and (not criteria.has_notes or order.has_notes)
            and (not criteria.low_inventory_only or matches_low_inventory(order, rollups))
        )

    return [order for order in orders if keep(order)]


def active_filter_count(criteria: FilterCriteria) -> int:
    """Number of predicate categories that currently restrict the result."""
    active = [
        bool(criteria.search_term),
        criteria.date_from is not None or criteria.date_to is not None,
        bool(criteria.statuses),
        bool(criteria.product_ids),
        criteria.min_total is not None or criteria.max_total is not None,
        criteria.has_notes,
        criteria.low_inventory_only,
    ]
    return sum(active)


def status_counts(orders: Iterable[Order]) -> dict[OrderStatus, int]:
    """Orders per status; every status is present, zero if unused."""
    counts = Counter(order.status for order in orders)
    return {status: counts.get(status, 0) for status in OrderStatus}
