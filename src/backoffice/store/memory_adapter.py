"""In-memory order store: deterministic store for testing and development.

Failures can be injected per order id to exercise partial batch outcomes.
"""

from collections.abc import Iterable

from backoffice.errors import OrderNotFoundError
from backoffice.order.order import Order, OrderStatus
from backoffice.store.port import OrderStorePort

_WRITABLE_FIELDS = {"status", "tracking_number", "tracking_url", "carrier", "notes", "shipped_at"}


class InMemoryOrderStore(OrderStorePort):
    """Order store backed by a dict, keyed by order id."""

    def __init__(self, orders: Iterable[Order] = ()):
        self._orders: dict[str, Order] = {}
        self._failures: dict[str, str] = {}
        self._timeouts: set[str] = set()
        self.updates: list[tuple[str, dict]] = []
        for order in orders:
            self.add(order)

    def add(self, order: Order) -> None:
        self._orders[order.id] = order

    def fail_updates_for(self, order_id: str, reason: str = "Order store rejected the update") -> None:
        """Make every write for ``order_id`` report failure."""
        self._failures[order_id] = reason

    def time_out_for(self, order_id: str) -> None:
        """Make every write for ``order_id`` raise ``TimeoutError``."""
        self._timeouts.add(order_id)

    def reset(self) -> None:
        self._orders.clear()
        self._failures.clear()
        self._timeouts.clear()
        self.updates.clear()

    def list_orders(self, statuses: Iterable[OrderStatus] | None = None) -> list[Order]:
        wanted = set(statuses) if statuses else None
        orders = sorted(self._orders.values(), key=lambda o: o.created_at)
        if wanted is None:
            return orders
        return [o for o in orders if o.status in wanted]

    def get_order(self, order_id: str) -> Order:
        try:
            return self._orders[order_id]
        except KeyError:
            raise OrderNotFoundError(order_id) from None

    def find_by_number(self, order_number: str) -> Order:
        for order in self._orders.values():
            if order.order_number == order_number:
                return order
        return self.get_order(order_number)

    def update_order(self, order_id: str, changes: dict) -> dict:
        if order_id in self._timeouts:
            raise TimeoutError(f"Order store timed out updating {order_id}")
        if order_id in self._failures:
            return {"updated": False, "error": self._failures[order_id]}
        if order_id not in self._orders:
            return {"updated": False, "error": f'Order "{order_id}" not found'}

        unknown = set(changes) - _WRITABLE_FIELDS
        if unknown:
            return {"updated": False, "error": f"Fields not writable: {', '.join(sorted(unknown))}"}

        self._orders[order_id] = self._orders[order_id].model_copy(update=changes)
        self.updates.append((order_id, dict(changes)))
        return {"updated": True}
