"""Order store port: abstract interface for order persistence.

The back office reads orders and writes status/tracking/notes updates through
this port. Adapters are swapped via configuration.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from backoffice.order.order import Order, OrderStatus


class OrderStorePort(ABC):
    """Abstract interface for order store adapters."""

    @abstractmethod
    def list_orders(self, statuses: Iterable[OrderStatus] | None = None) -> list[Order]:
        """Return orders, optionally restricted to the given statuses.

        Orders come back in creation order, oldest first.
        """
        ...

    @abstractmethod
    def get_order(self, order_id: str) -> Order:
        """Return a single order.

        Raises:
            OrderNotFoundError: no order has this id.
        """
        ...

    @abstractmethod
    def find_by_number(self, order_number: str) -> Order:
        """Return the order with this customer-facing number (or id).

        Raises:
            OrderNotFoundError: nothing matches.
        """
        ...

    @abstractmethod
    def update_order(self, order_id: str, changes: dict) -> dict:
        """Write status, tracking and notes fields for one order.

        Returns:
            dict with keys: updated (bool), error (str, only when not updated)
        """
        ...
