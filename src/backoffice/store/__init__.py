"""Order store registry: pluggable order persistence."""

from backoffice.config import get_settings

_store_instance = None


def get_order_store():
    """Return the configured order store adapter (singleton).

    Uses InMemoryOrderStore by default. In production, configure via the
    BACKOFFICE_ORDER_STORE_ADAPTER environment variable.
    """
    global _store_instance
    if _store_instance is None:
        adapter = get_settings().order_store_adapter
        if adapter == "memory":
            from backoffice.store.memory_adapter import InMemoryOrderStore

            _store_instance = InMemoryOrderStore()
        else:
            raise ValueError(f"Unknown order store adapter: {adapter}")
    return _store_instance


def reset_order_store():
    """Reset the order store singleton (useful for testing)."""
    global _store_instance
    _store_instance = None
