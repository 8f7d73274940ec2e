"""Applying status transitions to stored orders.

Loads the order, asks the state machine for the change, writes it through the
order store and, for shipments, hands the "shipped" event to the notifier.
"""

from datetime import datetime

import structlog

from backoffice.errors import OrderUpdateError
from backoffice.notifier import get_notifier
from backoffice.order.order import OrderStatus
from backoffice.order.state_machine import StatusChange, assign_tracking, transition
from backoffice.store import get_order_store
from backoffice.tracking.csv_parser import TrackingRecord

logger = structlog.get_logger(__name__)

SHIPPED_EVENT = "shipped"


def _notify(notifier, change: StatusChange) -> None:
    # Fire-and-forget: a notification problem never undoes a persisted change
    try:
        result = notifier.notify(change.order_id, SHIPPED_EVENT)
    except Exception as e:
        logger.warning(
            "Shipping notification dispatch raised",
            order_id=change.order_id,
            error=str(e),
        )
        return

    if result.get("status") == "failed":
        logger.warning(
            "Shipping notification not queued",
            order_id=change.order_id,
            error=result.get("error", "Unknown notification error"),
        )


def apply_change(change: StatusChange, store=None, notifier=None) -> None:
    """Persist a status change and emit its notification intent.

    Raises:
        OrderUpdateError: the order store reported the write as failed.
    """
    store = store or get_order_store()
    result = store.update_order(change.order_id, change.as_update())
    if not result.get("updated"):
        raise OrderUpdateError(change.order_id, result.get("error") or "Order update failed")

    logger.info(
        "Order status changed" if change.is_status_change else "Order tracking reassigned",
        order_id=change.order_id,
        order_number=change.order_number,
        from_status=change.from_status.value,
        to_status=change.to_status.value,
        tracking_number=change.tracking_number,
    )

    if change.notify_customer:
        _notify(notifier or get_notifier(), change)


def transition_order(
    order_id: str,
    target: OrderStatus | str,
    tracking_number: str | None = None,
    tracking_url: str | None = None,
    carrier: str | None = None,
    notes: str | None = None,
    store=None,
    notifier=None,
    now: datetime | None = None,
) -> StatusChange:
    """Move one stored order to ``target``.

    Raises:
        OrderNotFoundError: the order does not exist.
        StateError: the transition is not allowed; nothing is written.
        OrderUpdateError: the write failed.
    """
    store = store or get_order_store()
    order = store.get_order(order_id)
    change = transition(
        order,
        target,
        tracking_number=tracking_number,
        tracking_url=tracking_url,
        carrier=carrier,
        notes=notes,
        now=now,
    )
    apply_change(change, store=store, notifier=notifier)
    return change


def ship_from_record(record: TrackingRecord, store=None, notifier=None, now: datetime | None = None) -> StatusChange:
    """Ship the order named by an imported tracking record.

    An order that has already shipped only has its tracking replaced; the
    customer is not notified a second time.
    """
    store = store or get_order_store()
    order = store.find_by_number(record.order_number)
    if order.status == OrderStatus.SHIPPED:
        change = assign_tracking(
            order,
            record.tracking_number,
            tracking_url=record.tracking_url,
            carrier=record.carrier,
        )
    else:
        change = transition(
            order,
            OrderStatus.SHIPPED,
            tracking_number=record.tracking_number,
            tracking_url=record.tracking_url,
            carrier=record.carrier,
            now=now,
        )
    apply_change(change, store=store, notifier=notifier)
    return change
