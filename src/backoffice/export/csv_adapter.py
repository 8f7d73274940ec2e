"""CSV export adapter: renders orders as delimited text.

Two layouts are supported: a label-printing layout for carrier label tools
(name, address, weight) and a detailed layout for bookkeeping.
"""

import csv
import io
from collections.abc import Sequence
from datetime import UTC, datetime

import structlog

from backoffice.errors import ExportError
from backoffice.export.port import ExportArtifact, ExportFormat, ExportPort
from backoffice.order.order import Order, OrderStatus
from backoffice.shipping.weight import estimate_weight
from backoffice.store import get_order_store

logger = structlog.get_logger(__name__)

CARRIER_LABEL_COLUMNS = (
    "Name",
    "Company",
    "Address 1",
    "Address 2",
    "City",
    "State",
    "Zip",
    "Country",
    "Email",
    "Phone",
    "Order Number",
    "Weight (oz)",
    "Notes",
)

DETAILED_COLUMNS = (
    "Order Number",
    "Status",
    "Created At",
    "Customer Name",
    "Customer Email",
    "Items",
    "Subtotal",
    "Shipping",
    "Tax",
    "Discount",
    "Total",
    "Tracking Number",
    "Carrier",
    "Tracking URL",
    "Notes",
)

# Exported when no orders are selected
SHIPPING_QUEUE_STATUSES = frozenset({OrderStatus.PENDING, OrderStatus.PAID, OrderStatus.PROCESSING})

_FILENAME_PREFIX = {
    ExportFormat.CARRIER_LABEL: "shipping-labels",
    ExportFormat.DETAILED: "orders-detailed",
}


def _money(value: float) -> str:
    return f"{value:.2f}"


def _items_summary(order: Order) -> str:
    return "; ".join(f"{item.quantity} x {item.title or item.product_id}" for item in order.items)


def carrier_label_row(order: Order) -> list[str]:
    address = order.shipping_address
    weight = estimate_weight(order.items)
    return [
        order.customer_name,
        "",
        address.line1,
        address.line2,
        address.city,
        address.state,
        address.postal_code,
        address.country or "US",
        order.customer_email,
        order.customer_phone,
        order.order_number,
        f"{weight.weight_oz:g}",
        order.notes or "",
    ]


def detailed_row(order: Order) -> list[str]:
    return [
        order.order_number,
        order.status.value,
        order.created_at.isoformat(),
        order.customer_name,
        order.customer_email,
        _items_summary(order),
        _money(order.subtotal),
        _money(order.shipping),
        _money(order.tax),
        _money(order.discount),
        _money(order.total),
        order.tracking_number or "",
        order.carrier or "",
        order.tracking_url or "",
        order.notes or "",
    ]


class CsvExporter(ExportPort):
    """Builds CSV exports from orders held in the order store."""

    def __init__(self, store=None):
        self._store = store

    @property
    def store(self):
        return self._store or get_order_store()

    def export_orders(self, order_ids: Sequence[str], export_format: ExportFormat) -> ExportArtifact:
        """Export the given orders; with no ids, export the open shipping queue, newest first."""
        export_format = ExportFormat(export_format)
        if not order_ids:
            queue = self.store.list_orders(statuses=SHIPPING_QUEUE_STATUSES)
            order_ids = [order.id for order in reversed(queue)]
        if not order_ids:
            raise ExportError("No orders to export")

        orders = []
        for order_id in order_ids:
            try:
                orders.append(self.store.get_order(order_id))
            except LookupError as exc:
                raise ExportError(f"Cannot export order {order_id}: {exc}") from exc

        if export_format == ExportFormat.CARRIER_LABEL:
            header, render = CARRIER_LABEL_COLUMNS, carrier_label_row
        else:
            header, render = DETAILED_COLUMNS, detailed_row

        buffer = io.StringIO()
        writer = csv.writer(buffer, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
        writer.writerow(header)
        for order in orders:
            writer.writerow(render(order))

        now = datetime.now(UTC)
        artifact = ExportArtifact(
            filename=f"{_FILENAME_PREFIX[export_format]}-{now.date().isoformat()}.csv",
            content=buffer.getvalue().encode("utf-8"),
            export_format=export_format,
            order_count=len(orders),
            created_at=now,
        )
        logger.info(
            "Orders exported",
            export_format=export_format.value,
            order_count=len(orders),
            filename=artifact.filename,
        )
        return artifact
