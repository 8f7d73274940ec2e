"""Export port: abstract interface for order exports."""

from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict


class ExportFormat(str, Enum):
    CARRIER_LABEL = "carrier-label-format"
    DETAILED = "detailed"


class ExportArtifact(BaseModel):
    """A downloadable export file."""

    model_config = ConfigDict(frozen=True)

    filename: str
    content_type: str = "text/csv"
    content: bytes
    export_format: ExportFormat
    order_count: int
    created_at: datetime


class ExportPort(ABC):
    """Abstract interface for export adapters."""

    @abstractmethod
    def export_orders(self, order_ids: Sequence[str], export_format: ExportFormat) -> ExportArtifact:
        """Produce one artifact covering every requested order.

        An empty ``order_ids`` selects the adapter's default set of orders.

        Raises:
            ExportError: the artifact could not be produced. Nothing is
                returned for the orders that did resolve.
        """
        ...
