"""Back office error kinds.

``FormatError`` messages are shown to the operator verbatim. ``StateError`` is
raised before anything is written. Lookup failures are usually downgraded by
the caller rather than propagated.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from backoffice.batch.processor import BatchResult


class BackofficeError(Exception):
    """Base class for all back office errors."""


class FormatError(BackofficeError, ValueError):
    """Malformed or incomplete CSV input."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class StateError(BackofficeError):
    """Illegal order status transition."""

    def __init__(self, current: str, requested: str, reason: str | None = None):
        message = f"Cannot transition from {current} to {requested}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
        self.current = current
        self.requested = requested
        self.messages = {"status": [message]}


class StockLookupError(BackofficeError, LookupError):
    """Stock data unavailable for a requested order."""


class OrderNotFoundError(BackofficeError, LookupError):
    """No order exists for the requested id or order number."""

    def __init__(self, reference: str):
        super().__init__(f'Order "{reference}" not found')
        self.reference = reference


class OrderUpdateError(BackofficeError):
    """The order store refused or failed a write."""

    def __init__(self, order_id: str, reason: str):
        super().__init__(reason)
        self.order_id = order_id
        self.reason = reason


class ExportError(BackofficeError):
    """The export collaborator could not produce an artifact."""


class PartialBatchFailure(BackofficeError):
    """Some, but not all, items of a batch failed."""

    def __init__(self, result: BatchResult):
        super().__init__(f"{result.failed} of {result.requested} orders failed: " + "; ".join(result.errors))
        self.result = result
