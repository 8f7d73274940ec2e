"""Package weight estimation.

Every package weighs at least the packaging overhead. Items with a known
per-unit weight contribute ``weight × quantity``; items without one are
estimated at ``DEFAULT_ITEM_WEIGHT_OZ`` per unit and flag the whole order as
estimated.
"""

from collections.abc import Iterable
from enum import Enum

from pydantic import BaseModel, ConfigDict

from backoffice.order.order import OrderItem

# Box, padding and filler
PACKAGING_WEIGHT_OZ = 4.0
# Typical single candle
DEFAULT_ITEM_WEIGHT_OZ = 12.0

OUNCES_PER_POUND = 16


class WeightSource(str, Enum):
    PRODUCT_DATA = "from product data"
    ESTIMATED = "estimated"


class WeightEstimate(BaseModel):
    model_config = ConfigDict(frozen=True)

    weight_oz: float
    source: WeightSource
    has_unknown_weights: bool
    item_count: int = 0

    @property
    def weight_lb(self) -> float:
        return self.weight_oz / OUNCES_PER_POUND

    @property
    def label(self) -> str:
        return format_weight(self.weight_oz)


def estimate_weight(items: Iterable[OrderItem]) -> WeightEstimate:
    """Estimate the shippable weight of an order's items in ounces.

    Never fails: an empty item list weighs exactly the packaging overhead.
    """
    total = PACKAGING_WEIGHT_OZ
    has_unknown = False
    item_count = 0

    for item in items:
        item_count += item.quantity
        if item.weight is None:
            has_unknown = True
            total += DEFAULT_ITEM_WEIGHT_OZ * item.quantity
        else:
            total += item.weight * item.quantity

    return WeightEstimate(
        weight_oz=total,
        source=WeightSource.ESTIMATED if has_unknown else WeightSource.PRODUCT_DATA,
        has_unknown_weights=has_unknown,
        item_count=item_count,
    )


def format_weight(weight_oz: float, unit: str = "auto") -> str:
    """Render a weight for display: ounces under a pound, pounds otherwise."""
    if unit not in ("auto", "oz", "lb"):
        raise ValueError(f"Weight unit must be 'auto', 'oz' or 'lb', got '{unit}'")
    if unit == "oz" or (unit == "auto" and weight_oz < OUNCES_PER_POUND):
        return f"{weight_oz:.1f} oz"
    return f"{weight_oz / OUNCES_PER_POUND:.2f} lb"
