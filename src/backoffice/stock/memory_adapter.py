"""In-memory stock lookup: stock levels held in a dict for tests and development."""

from collections.abc import Iterable

from backoffice.errors import StockLookupError
from backoffice.inventory.risk import StockLevel, StockSnapshot
from backoffice.stock.port import StockLookupPort
from backoffice.store import get_order_store


class InMemoryStockLookup(StockLookupPort):
    """Answers stock queries from levels registered with ``set_level``.

    Order items are resolved through the order store so the snapshot for an
    order only holds levels for the products it contains.
    """

    def __init__(self, store=None):
        self._store = store
        self._levels: dict[tuple[str, str | None], StockLevel] = {}
        self._unavailable: set[str] = set()

    @property
    def store(self):
        return self._store or get_order_store()

    def set_level(
        self,
        product_id: str,
        quantity: int,
        variant_id: str | None = None,
        product_title: str | None = None,
        variant_title: str | None = None,
    ) -> None:
        self._levels[(product_id, variant_id)] = StockLevel(
            product_id=product_id,
            variant_id=variant_id,
            quantity=quantity,
            product_title=product_title,
            variant_title=variant_title,
        )

    def make_unavailable(self, order_id: str) -> None:
        """Make lookups for ``order_id`` fail."""
        self._unavailable.add(order_id)

    def reset(self) -> None:
        self._levels.clear()
        self._unavailable.clear()

    def stock_for_orders(self, order_ids: Iterable[str]) -> dict[str, StockSnapshot]:
        snapshots = {}
        for order_id in order_ids:
            try:
                snapshots[order_id] = self.stock_for_order(order_id)
            except LookupError:
                continue
        return snapshots

    def stock_for_order(self, order_id: str) -> StockSnapshot:
        if order_id in self._unavailable:
            raise StockLookupError(f"Stock service unavailable for order {order_id}")

        order = self.store.get_order(order_id)
        levels = []
        for item in order.items:
            for key in ((item.product_id, item.variant_id), (item.product_id, None)):
                level = self._levels.get(key)
                if level is not None and level not in levels:
                    levels.append(level)
        return StockSnapshot(levels=levels)
