"""Order model as seen by the back office.

Orders are created at checkout by the storefront. The back office reads them,
derives weight and inventory annotations, and changes them only through
status transitions and tracking assignment.

Status flow:
    PENDING → PAID → PROCESSING → SHIPPED → DELIVERED / FULFILLED
    ON_HOLD from any pre-shipped state
    CANCELLED / REFUNDED from any non-terminal state
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    FULFILLED = "fulfilled"
    ON_HOLD = "on_hold"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
class ShippingAddress(BaseModel):
    """Where the order ships, captured at checkout."""

    model_config = ConfigDict(frozen=True)

    line1: str = ""
    line2: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = "US"


class OrderNote(BaseModel):
    """An internal note record attached to an order by staff."""

    model_config = ConfigDict(frozen=True)

    id: str
    body: str
    author: str | None = None
    created_at: datetime | None = None


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
class OrderItem(BaseModel):
    """A purchased line item.

    ``weight`` is the per-unit weight in ounces. ``None`` means the weight is
    unknown, which is different from a weightless item.
    """

    model_config = ConfigDict(frozen=True)

    product_id: str
    variant_id: str | None = None
    title: str = ""
    quantity: int = Field(ge=1)
    unit_price: float = Field(default=0.0, ge=0.0)
    weight: float | None = Field(default=None, ge=0.0)


class Order(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    order_number: str
    status: OrderStatus = OrderStatus.PENDING

    subtotal: float = Field(default=0.0, ge=0.0)
    shipping: float = Field(default=0.0, ge=0.0)
    tax: float = Field(default=0.0, ge=0.0)
    discount: float = Field(default=0.0, ge=0.0)
    total: float = Field(default=0.0, ge=0.0)

    customer_name: str = ""
    customer_email: str = ""
    customer_phone: str = ""
    shipping_address: ShippingAddress = Field(default_factory=ShippingAddress)

    tracking_number: str | None = None
    tracking_url: str | None = None
    carrier: str | None = None
    shipped_at: datetime | None = None

    notes: str | None = None
    note_records: list[OrderNote] = Field(default_factory=list)

    created_at: datetime
    items: list[OrderItem] = Field(default_factory=list)

    @property
    def has_notes(self) -> bool:
        return bool(self.notes and self.notes.strip()) or len(self.note_records) > 0

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    @property
    def product_ids(self) -> set[str]:
        return {item.product_id for item in self.items}
