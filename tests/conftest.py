from datetime import UTC, datetime
from pathlib import Path

import pytest

from backoffice.config import reset_settings
from backoffice.export import reset_exporter
from backoffice.notifier import get_notifier, reset_notifier
from backoffice.order.order import Order, OrderItem, OrderStatus, ShippingAddress
from backoffice.stock import get_stock_lookup, reset_stock_lookup
from backoffice.store import get_order_store, reset_order_store


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def run_around_tests(monkeypatch):
    """Fresh settings and collaborators for every test."""
    monkeypatch.setenv("BACKOFFICE_ENVIRONMENT", "test")
    reset_settings()
    yield
    reset_order_store()
    reset_stock_lookup()
    reset_exporter()
    reset_notifier()
    reset_settings()


@pytest.fixture()
def order_store():
    return get_order_store()


@pytest.fixture()
def stock_lookup():
    return get_stock_lookup()


@pytest.fixture()
def notifier():
    return get_notifier()


def make_order(
    order_id: str = "ord-1",
    status: OrderStatus = OrderStatus.PAID,
    items: list[OrderItem] | None = None,
    **overrides,
) -> Order:
    """Build an order with sensible defaults for tests."""
    fields = {
        "id": order_id,
        "order_number": f"#{order_id.removeprefix('ord-')}",
        "status": status,
        "subtotal": 40.0,
        "shipping": 5.0,
        "tax": 3.2,
        "total": 48.2,
        "customer_name": "Ada Lovelace",
        "customer_email": "ada@example.com",
        "customer_phone": "555-0100",
        "shipping_address": ShippingAddress(
            line1="1 Analytical Way",
            city="London",
            state="LN",
            postal_code="10001",
        ),
        "created_at": datetime(2024, 3, 1, 12, 0, tzinfo=UTC),
        "items": items
        if items is not None
        else [OrderItem(product_id="prod-1", title="Lavender Candle", quantity=2, unit_price=20.0, weight=10.0)],
    }
    fields.update(overrides)
    return Order(**fields)


@pytest.fixture()
def order_factory():
    return make_order
