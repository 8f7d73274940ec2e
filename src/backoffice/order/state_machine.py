"""Fulfillment state machine.

Decides whether an order may move to a requested status and what the move
implies: tracking data, a synthesized tracking link, and whether the customer
should be told. ``assign_tracking`` corrects the tracking of a shipped order
without moving it. Neither touches the order itself; callers persist the
returned ``StatusChange`` through the order store.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict

from backoffice.errors import StateError
from backoffice.order.order import Order, OrderStatus
from backoffice.shipping.carriers import normalize_carrier, tracking_url_for

_PRE_SHIPPED = {OrderStatus.PENDING, OrderStatus.PAID, OrderStatus.PROCESSING}

_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {
        OrderStatus.PAID,
        OrderStatus.PROCESSING,
        OrderStatus.ON_HOLD,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
    },
    OrderStatus.PAID: {
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.ON_HOLD,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
    },
    OrderStatus.PROCESSING: {
        OrderStatus.SHIPPED,
        OrderStatus.ON_HOLD,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
    },
    OrderStatus.ON_HOLD: _PRE_SHIPPED | {OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.SHIPPED: {
        OrderStatus.DELIVERED,
        OrderStatus.FULFILLED,
        OrderStatus.CANCELLED,
        OrderStatus.REFUNDED,
    },
    OrderStatus.DELIVERED: set(),  # terminal
    OrderStatus.FULFILLED: set(),  # terminal
    OrderStatus.CANCELLED: set(),  # terminal
    OrderStatus.REFUNDED: set(),  # terminal
}

TERMINAL_STATUSES = frozenset(status for status, targets in _VALID_TRANSITIONS.items() if not targets)


class StatusChange(BaseModel):
    """The write a transition asks for, plus the notification intent."""

    model_config = ConfigDict(frozen=True)

    order_id: str
    order_number: str
    from_status: OrderStatus
    to_status: OrderStatus
    tracking_number: str | None = None
    tracking_url: str | None = None
    carrier: str | None = None
    notes: str | None = None
    shipped_at: datetime | None = None
    notify_customer: bool = False

    def as_update(self) -> dict:
        """Fields to write on the order; unset fields are left alone.

        A new tracking number always rewrites the tracking URL, clearing it
        when none could be built.
        """
        update = {"status": self.to_status}
        for field in ("tracking_number", "tracking_url", "carrier", "notes", "shipped_at"):
            value = getattr(self, field)
            if value is not None:
                update[field] = value
        if self.tracking_number is not None:
            update["tracking_url"] = self.tracking_url
        return update

    @property
    def is_status_change(self) -> bool:
        return self.from_status != self.to_status


def allowed_transitions(status: OrderStatus) -> frozenset[OrderStatus]:
    return frozenset(_VALID_TRANSITIONS.get(status, set()))


def can_transition(current: OrderStatus, target: OrderStatus) -> bool:
    return target in _VALID_TRANSITIONS.get(current, set())


def _assert_can_transition(current: OrderStatus, target: OrderStatus) -> None:
    if not can_transition(current, target):
        raise StateError(current.value, target.value)


def _merged_notes(order: Order, notes: str | None) -> str | None:
    # New notes are appended to the order's existing notes, never replace them
    if not notes or not notes.strip():
        return None
    existing = (order.notes or "").strip()
    return f"{existing}\n{notes.strip()}" if existing else notes.strip()


def _tracking_fields(
    order: Order,
    current: OrderStatus,
    target: OrderStatus,
    tracking_number: str | None,
    tracking_url: str | None,
    carrier: str | None,
) -> dict:
    number = (tracking_number or "").strip() or (order.tracking_number or "").strip()
    if not number:
        raise StateError(current.value, target.value, "a tracking number is required")

    # The operator's spelling is kept; the normalized code only picks the template
    label = (carrier or "").strip() or (order.carrier or "").strip() or None
    url = (tracking_url or "").strip() or tracking_url_for(normalize_carrier(label), number)
    return {"tracking_number": number, "tracking_url": url, "carrier": label}


def transition(
    order: Order,
    target: OrderStatus | str,
    tracking_number: str | None = None,
    tracking_url: str | None = None,
    carrier: str | None = None,
    notes: str | None = None,
    now: datetime | None = None,
) -> StatusChange:
    """Validate a status change and work out its side effects.

    Shipping needs a tracking number, either supplied here or already on the
    order. Without an explicit tracking URL one is built from the carrier's
    template; unknown carriers leave it blank. ``notes`` are appended to the
    order's existing notes.

    Raises:
        StateError: the transition is not allowed from the order's status, or
            a shipment has no tracking number.
        ValueError: ``target`` is not a known status.
    """
    target = OrderStatus(target)
    current = OrderStatus(order.status)
    _assert_can_transition(current, target)

    change = {
        "order_id": order.id,
        "order_number": order.order_number,
        "from_status": current,
        "to_status": target,
        "notes": _merged_notes(order, notes),
    }

    if target == OrderStatus.SHIPPED:
        change.update(
            _tracking_fields(order, current, target, tracking_number, tracking_url, carrier),
            shipped_at=now or datetime.now(UTC),
            notify_customer=True,
        )

    return StatusChange(**change)


def assign_tracking(
    order: Order,
    tracking_number: str | None,
    tracking_url: str | None = None,
    carrier: str | None = None,
) -> StatusChange:
    """Replace the tracking details of an order that has already shipped.

    The status and ship date stay as they are and no second shipping
    notification is requested. A new tracking number without a URL gets a
    freshly built link, so the old one is never left pointing elsewhere.

    Raises:
        StateError: the order has not shipped, or no tracking number is given.
    """
    current = OrderStatus(order.status)
    if current != OrderStatus.SHIPPED:
        raise StateError(current.value, OrderStatus.SHIPPED.value, "tracking can only be reassigned on shipped orders")

    return StatusChange(
        order_id=order.id,
        order_number=order.order_number,
        from_status=current,
        to_status=current,
        **_tracking_fields(order, current, current, tracking_number, tracking_url, carrier),
    )
