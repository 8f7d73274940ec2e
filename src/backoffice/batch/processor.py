"""Batch actions across many orders.

Status updates and tracking imports treat every order independently: one
failure never blocks or rolls back the others, and the result always accounts
for every requested item. Exports are the exception; a single artifact is
produced for the whole selection or nothing is.
"""

from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from enum import Enum
from typing import TypeVar

import structlog
from pydantic import BaseModel, ConfigDict, Field

from backoffice.config import get_settings
from backoffice.errors import (
    OrderNotFoundError,
    OrderUpdateError,
    PartialBatchFailure,
    StateError,
)
from backoffice.export import get_exporter
from backoffice.export.port import ExportArtifact, ExportFormat
from backoffice.notifier import get_notifier
from backoffice.order.fulfillment import ship_from_record, transition_order
from backoffice.order.order import OrderStatus
from backoffice.store import get_order_store
from backoffice.tracking.csv_parser import TrackingRecord

logger = structlog.get_logger(__name__)

T = TypeVar("T")


class BatchOperation(str, Enum):
    EXPORT = "export"
    STATUS_UPDATE = "status-update"
    TRACKING_IMPORT = "tracking-import"


class BatchResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    operation: BatchOperation
    requested: int
    succeeded: int = 0
    errors: list[str] = Field(default_factory=list)
    failed_ids: list[str] = Field(default_factory=list)
    artifact: ExportArtifact | None = None

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def all_failed(self) -> bool:
        return self.requested > 0 and self.succeeded == 0

    @property
    def is_partial(self) -> bool:
        return self.failed > 0 and self.succeeded > 0

    def raise_for_partial_failure(self) -> None:
        """Raise ``PartialBatchFailure`` when some, but not all, items failed."""
        if self.is_partial:
            raise PartialBatchFailure(self)


def _reason(exc: Exception) -> str:
    if isinstance(exc, OrderNotFoundError):
        return "not found"
    if isinstance(exc, OrderUpdateError):
        return exc.reason
    if isinstance(exc, TimeoutError):
        return f"timed out ({exc})" if str(exc) else "timed out"
    return str(exc) or type(exc).__name__


class BatchActionProcessor:
    """Applies one operation to many orders and accounts for each of them."""

    def __init__(self, store=None, exporter=None, notifier=None, max_workers: int | None = None):
        self._store = store
        self._exporter = exporter
        self._notifier = notifier
        self.max_workers = max_workers or get_settings().batch_max_workers

    @property
    def store(self):
        return self._store or get_order_store()

    @property
    def exporter(self):
        return self._exporter or get_exporter()

    @property
    def notifier(self):
        return self._notifier or get_notifier()

    # -------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------
    def run(
        self,
        operation: BatchOperation | str,
        order_ids: Sequence[str],
        status: OrderStatus | str | None = None,
        export_format: ExportFormat | str | None = None,
    ) -> BatchResult:
        """Run an export or status update selected by ``operation``."""
        operation = BatchOperation(operation)
        if operation == BatchOperation.STATUS_UPDATE:
            if status is None:
                raise ValueError("A target status is required for status updates")
            return self.update_status(order_ids, status)
        if operation == BatchOperation.EXPORT:
            return self.export(order_ids, export_format or ExportFormat.CARRIER_LABEL)
        raise ValueError(f"Operation {operation.value} takes tracking records, use import_tracking()")

    # -------------------------------------------------------------------
    # Per-item execution
    # -------------------------------------------------------------------
    def _each(self, items: Sequence[T], work: Callable[[T], None]) -> list[Exception | None]:
        """Run ``work`` on every item; return each item's exception (or None) in input order."""

        def attempt(item: T) -> Exception | None:
            try:
                work(item)
            except Exception as e:
                return e
            return None

        if self.max_workers > 1 and len(items) > 1:
            # Leaving the block waits for in-flight items, so their outcome is always counted
            with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
                return list(executor.map(attempt, items))
        return [attempt(item) for item in items]

    def _summarize(
        self,
        operation: BatchOperation,
        keys: Sequence[str],
        outcomes: Iterable[Exception | None],
        describe: Callable[[str, Exception], str],
    ) -> BatchResult:
        errors = []
        failed_ids = []
        succeeded = 0
        for key, outcome in zip(keys, outcomes):
            if outcome is None:
                succeeded += 1
                continue
            message = describe(key, outcome)
            errors.append(message)
            failed_ids.append(key)
            logger.warning(
                "Batch item failed",
                operation=operation.value,
                item=key,
                error=message,
                error_type=type(outcome).__name__,
            )

        result = BatchResult(
            operation=operation,
            requested=len(keys),
            succeeded=succeeded,
            errors=errors,
            failed_ids=failed_ids,
        )
        logger.info(
            "Batch processed",
            operation=operation.value,
            requested=result.requested,
            succeeded=result.succeeded,
            failed=result.failed,
        )
        return result

    # -------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------
    def update_status(self, order_ids: Sequence[str], status: OrderStatus | str, notes: str | None = None) -> BatchResult:
        """Move every order to ``status``, each as its own request."""
        target = OrderStatus(status)
        order_ids = list(order_ids)
        store, notifier = self.store, self.notifier

        def update(order_id: str) -> None:
            transition_order(order_id, target, notes=notes, store=store, notifier=notifier)

        outcomes = self._each(order_ids, update)
        return self._summarize(
            BatchOperation.STATUS_UPDATE,
            order_ids,
            outcomes,
            lambda order_id, exc: f"Order {order_id}: {_reason(exc)}",
        )

    def import_tracking(self, records: Sequence[TrackingRecord]) -> BatchResult:
        """Ship every order named in parsed tracking records."""
        records = list(records)
        store, notifier = self.store, self.notifier

        def describe(index: str, exc: Exception) -> str:
            record = records[int(index)]
            label = f"Row {record.row}" if record.row is not None else f"Order {record.order_number}"
            if isinstance(exc, OrderNotFoundError):
                return f'{label}: Order "{record.order_number}" not found'
            if isinstance(exc, StateError | OrderUpdateError):
                return f'{label}: Failed to update order "{record.order_number}": {_reason(exc)}'
            return f"{label}: {_reason(exc)}"

        outcomes = self._each(records, lambda record: ship_from_record(record, store=store, notifier=notifier))
        result = self._summarize(
            BatchOperation.TRACKING_IMPORT,
            [str(i) for i in range(len(records))],
            outcomes,
            describe,
        )
        failed_numbers = [records[int(i)].order_number for i in result.failed_ids]
        return result.model_copy(update={"failed_ids": failed_numbers})

    def export(self, order_ids: Sequence[str], export_format: ExportFormat | str) -> BatchResult:
        """Export the selection as a single artifact; all or nothing.

        An empty selection asks the exporter for its default set (the open
        shipping queue for the CSV exporter).
        """
        export_format = ExportFormat(export_format)
        order_ids = list(order_ids)

        try:
            artifact = self.exporter.export_orders(order_ids, export_format)
        except Exception as e:
            # Timeouts and collaborator crashes fail the export like ExportError does
            logger.error(
                "Export failed",
                export_format=export_format.value,
                requested=len(order_ids),
                error=_reason(e),
                error_type=type(e).__name__,
            )
            return BatchResult(
                operation=BatchOperation.EXPORT,
                requested=len(order_ids),
                errors=[f"Export failed: {_reason(e)}"],
                failed_ids=order_ids,
            )

        return BatchResult(
            operation=BatchOperation.EXPORT,
            requested=len(order_ids) or artifact.order_count,
            succeeded=artifact.order_count,
            artifact=artifact,
        )
