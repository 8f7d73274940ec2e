"""Tests for the fulfillment state machine."""

from datetime import UTC, datetime

import pytest

from backoffice.errors import StateError
from backoffice.order.order import OrderStatus
from backoffice.order.state_machine import (
    TERMINAL_STATUSES,
    allowed_transitions,
    assign_tracking,
    can_transition,
    transition,
)

NOW = datetime(2024, 3, 2, 10, 30, tzinfo=UTC)


class TestTransitionTable:
    def test_happy_path(self):
        path = [
            OrderStatus.PENDING,
            OrderStatus.PAID,
            OrderStatus.PROCESSING,
            OrderStatus.SHIPPED,
            OrderStatus.DELIVERED,
        ]
        for current, target in zip(path, path[1:]):
            assert can_transition(current, target)

    def test_terminal_states(self):
        assert TERMINAL_STATUSES == {
            OrderStatus.DELIVERED,
            OrderStatus.FULFILLED,
            OrderStatus.CANCELLED,
            OrderStatus.REFUNDED,
        }
        for status in TERMINAL_STATUSES:
            assert allowed_transitions(status) == frozenset()

    @pytest.mark.parametrize("status", [OrderStatus.PENDING, OrderStatus.PAID, OrderStatus.PROCESSING])
    def test_on_hold_from_pre_shipped(self, status):
        assert can_transition(status, OrderStatus.ON_HOLD)

    def test_no_hold_after_shipping(self):
        assert not can_transition(OrderStatus.SHIPPED, OrderStatus.ON_HOLD)

    @pytest.mark.parametrize(
        "status",
        [OrderStatus.PENDING, OrderStatus.PAID, OrderStatus.PROCESSING, OrderStatus.ON_HOLD, OrderStatus.SHIPPED],
    )
    def test_cancel_and_refund_from_non_terminal(self, status):
        assert can_transition(status, OrderStatus.CANCELLED)
        assert can_transition(status, OrderStatus.REFUNDED)

    def test_release_from_hold(self):
        assert can_transition(OrderStatus.ON_HOLD, OrderStatus.PROCESSING)


class TestTransition:
    def test_cancelled_to_shipped_rejected(self, order_factory):
        order = order_factory(status=OrderStatus.CANCELLED)
        with pytest.raises(StateError) as exc:
            transition(order, OrderStatus.SHIPPED, tracking_number="9400")
        assert exc.value.current == "cancelled"
        assert exc.value.requested == "shipped"
        assert "cancelled" in str(exc.value) and "shipped" in str(exc.value)
        assert exc.value.messages == {"status": [str(exc.value)]}

    def test_paid_to_shipped_synthesizes_usps_url(self, order_factory):
        order = order_factory(status=OrderStatus.PAID)
        change = transition(order, OrderStatus.SHIPPED, tracking_number="9400111899223456789012", carrier="usps", now=NOW)
        assert change.to_status == OrderStatus.SHIPPED
        assert change.tracking_url.startswith("https://tools.usps.com/")
        assert "9400111899223456789012" in change.tracking_url
        assert change.carrier == "usps"
        assert change.notify_customer is True
        assert change.shipped_at == NOW

    def test_explicit_url_kept(self, order_factory):
        order = order_factory(status=OrderStatus.PROCESSING)
        change = transition(
            order,
            "shipped",
            tracking_number="1Z999",
            tracking_url="https://example.com/t/1Z999",
            carrier="UPS",
        )
        assert change.tracking_url == "https://example.com/t/1Z999"
        assert change.carrier == "UPS"

    def test_unknown_carrier_leaves_url_blank(self, order_factory):
        order = order_factory(status=OrderStatus.PROCESSING)
        change = transition(order, OrderStatus.SHIPPED, tracking_number="XYZ", carrier="Pigeon Post")
        assert change.tracking_url is None
        assert change.tracking_number == "XYZ"

    def test_shipping_requires_tracking_number(self, order_factory):
        order = order_factory(status=OrderStatus.PROCESSING)
        with pytest.raises(StateError, match="tracking number is required"):
            transition(order, OrderStatus.SHIPPED, tracking_number="   ")

    def test_shipping_reuses_existing_tracking_number(self, order_factory):
        order = order_factory(status=OrderStatus.PROCESSING, tracking_number="EXISTING1", carrier="fedex")
        change = transition(order, OrderStatus.SHIPPED)
        assert change.tracking_number == "EXISTING1"
        assert "EXISTING1" in change.tracking_url

    def test_processing_needs_no_tracking(self, order_factory):
        change = transition(order_factory(status=OrderStatus.PAID), OrderStatus.PROCESSING)
        assert change.tracking_number is None
        assert change.notify_customer is False
        assert change.as_update() == {"status": OrderStatus.PROCESSING}

    def test_notes_carried_into_update(self, order_factory):
        change = transition(order_factory(status=OrderStatus.PAID), OrderStatus.ON_HOLD, notes=" address check ")
        assert change.as_update() == {"status": OrderStatus.ON_HOLD, "notes": "address check"}

    def test_unknown_target_status(self, order_factory):
        with pytest.raises(ValueError):
            transition(order_factory(), "teleported")

    def test_order_not_mutated(self, order_factory):
        order = order_factory(status=OrderStatus.PAID)
        transition(order, OrderStatus.SHIPPED, tracking_number="1Z", carrier="ups")
        assert order.status == OrderStatus.PAID
        assert order.tracking_number is None

    def test_carrier_spelling_kept_for_display(self, order_factory):
        order = order_factory(status=OrderStatus.PROCESSING)
        change = transition(order, OrderStatus.SHIPPED, tracking_number="7777", carrier="  FedEx ")
        assert change.carrier == "FedEx"
        assert change.tracking_url == "https://www.fedex.com/fedextrack/?trknbr=7777"

    def test_notes_appended_to_existing_notes(self, order_factory):
        order = order_factory(status=OrderStatus.PAID, notes="Gift wrap")
        change = transition(order, OrderStatus.ON_HOLD, notes="Address check")
        assert change.notes == "Gift wrap\nAddress check"

    def test_blank_notes_leave_existing_notes_alone(self, order_factory):
        order = order_factory(status=OrderStatus.PAID, notes="Gift wrap")
        change = transition(order, OrderStatus.PROCESSING, notes="   ")
        assert "notes" not in change.as_update()


class TestAssignTracking:
    def test_replaces_tracking_on_shipped_order(self, order_factory):
        order = order_factory(
            status=OrderStatus.SHIPPED,
            tracking_number="OLD",
            tracking_url="https://www.ups.com/track?tracknum=OLD",
            carrier="UPS",
            shipped_at=NOW,
        )
        change = assign_tracking(order, "1ZNEW")
        assert change.from_status == change.to_status == OrderStatus.SHIPPED
        assert change.is_status_change is False
        assert change.tracking_number == "1ZNEW"
        assert change.tracking_url == "https://www.ups.com/track?tracknum=1ZNEW"
        assert change.carrier == "UPS"
        assert change.notify_customer is False
        assert "shipped_at" not in change.as_update()

    def test_stale_url_cleared_for_unknown_carrier(self, order_factory):
        order = order_factory(
            status=OrderStatus.SHIPPED,
            tracking_number="OLD",
            tracking_url="https://courier.example.com/OLD",
            carrier="Local Courier",
        )
        update = assign_tracking(order, "NEW").as_update()
        assert update["tracking_number"] == "NEW"
        assert update["tracking_url"] is None

    def test_not_shipped_rejected(self, order_factory):
        with pytest.raises(StateError, match="shipped orders"):
            assign_tracking(order_factory(status=OrderStatus.PAID), "1Z")

    def test_requires_tracking_number(self, order_factory):
        order = order_factory(status=OrderStatus.SHIPPED)
        with pytest.raises(StateError, match="tracking number is required"):
            assign_tracking(order, "  ")
