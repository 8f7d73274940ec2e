"""Stock lookup port: abstract interface for current stock levels."""

from abc import ABC, abstractmethod
from collections.abc import Iterable

from backoffice.errors import StockLookupError
from backoffice.inventory.risk import StockSnapshot


class StockLookupPort(ABC):
    """Abstract interface for stock lookup adapters."""

    @abstractmethod
    def stock_for_orders(self, order_ids: Iterable[str]) -> dict[str, StockSnapshot]:
        """Return current stock for the items of each requested order.

        Orders the adapter could not resolve are left out of the result.
        """
        ...

    def stock_for_order(self, order_id: str) -> StockSnapshot:
        """Return current stock for one order's items.

        Raises:
            StockLookupError: stock data is unavailable for this order.
        """
        snapshots = self.stock_for_orders([order_id])
        if order_id not in snapshots:
            raise StockLookupError(f"No stock data for order {order_id}")
        return snapshots[order_id]
