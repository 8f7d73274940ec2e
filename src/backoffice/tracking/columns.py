"""Header column resolution for tracking CSV files.

Carrier and marketplace exports name their columns differently. Each logical
field has an ordered alias list; the first alias present in the header wins.
"""

from collections.abc import Sequence

from pydantic import BaseModel, ConfigDict

ORDER_NUMBER_ALIASES = ("Order Number", "Order ID", "order_number", "order_id", "Order #", "OrderNumber")
TRACKING_NUMBER_ALIASES = ("Tracking Number", "Tracking", "tracking_number", "tracking", "TrackingNumber")
TRACKING_URL_ALIASES = ("Tracking URL", "Tracking Link", "tracking_url", "tracking_link", "URL")
CARRIER_ALIASES = ("Carrier", "Shipping Carrier", "carrier", "Ship Via", "Service")


def resolve_column(header: Sequence[str], aliases: Sequence[str]) -> int | None:
    """Return the index of the first header cell matching an alias.

    Matching is case-insensitive on the whole trimmed cell. Aliases are tried
    in order, so an earlier alias wins even if a later one appears first in
    the header.
    """
    cells = [cell.strip().lower() for cell in header]
    for alias in aliases:
        wanted = alias.strip().lower()
        for index, cell in enumerate(cells):
            if cell == wanted:
                return index
    return None


class TrackingColumns(BaseModel):
    """Resolved positions of the tracking fields in a header row."""

    model_config = ConfigDict(frozen=True)

    order_number: int | None
    tracking_number: int | None
    tracking_url: int | None = None
    carrier: int | None = None

    @property
    def min_row_length(self) -> int:
        """Tokens a data row needs to reach both mandatory columns."""
        required = [i for i in (self.order_number, self.tracking_number) if i is not None]
        return max(required, default=-1) + 1


def resolve_tracking_columns(header: Sequence[str]) -> TrackingColumns:
    return TrackingColumns(
        order_number=resolve_column(header, ORDER_NUMBER_ALIASES),
        tracking_number=resolve_column(header, TRACKING_NUMBER_ALIASES),
        tracking_url=resolve_column(header, TRACKING_URL_ALIASES),
        carrier=resolve_column(header, CARRIER_ALIASES),
    )
