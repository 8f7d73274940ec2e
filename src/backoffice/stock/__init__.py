"""Stock lookup registry: pluggable stock level source."""

from backoffice.config import get_settings

_stock_instance = None


def get_stock_lookup():
    """Return the configured stock lookup adapter (singleton).

    Uses InMemoryStockLookup by default. In production, configure via the
    BACKOFFICE_STOCK_ADAPTER environment variable.
    """
    global _stock_instance
    if _stock_instance is None:
        adapter = get_settings().stock_adapter
        if adapter == "memory":
            from backoffice.stock.memory_adapter import InMemoryStockLookup

            _stock_instance = InMemoryStockLookup()
        else:
            raise ValueError(f"Unknown stock adapter: {adapter}")
    return _stock_instance


def reset_stock_lookup():
    """Reset the stock lookup singleton (useful for testing)."""
    global _stock_instance
    _stock_instance = None
