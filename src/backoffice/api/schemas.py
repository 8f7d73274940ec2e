"""Pydantic API schemas for the back office order endpoints.

These are the external API contracts; domain values are translated into them
in the route handlers.
"""

from datetime import datetime

from pydantic import BaseModel, Field

from backoffice.export.port import ExportFormat
from backoffice.inventory.risk import InventoryAlert, InventoryReport, InventorySummary
from backoffice.order.filtering import FilterCriteria
from backoffice.order.order import OrderStatus
from backoffice.shipping.weight import WeightEstimate
from backoffice.tracking.csv_parser import TrackingRecord


# ---------------------------------------------------------------------------
# Request schemas
# ---------------------------------------------------------------------------
class TrackingCsvRequest(BaseModel):
    csv_text: str


class OrderSearchRequest(BaseModel):
    criteria: FilterCriteria = Field(default_factory=FilterCriteria)


class UpdateStatusRequest(BaseModel):
    status: OrderStatus
    tracking_number: str | None = None
    tracking_url: str | None = None
    carrier: str | None = None
    notes: str | None = None


class BatchStatusRequest(BaseModel):
    order_ids: list[str] = Field(min_length=1)
    status: OrderStatus


class BatchExportRequest(BaseModel):
    # Empty exports the open shipping queue
    order_ids: list[str] = Field(default_factory=list)
    export_format: ExportFormat = ExportFormat.CARRIER_LABEL


# ---------------------------------------------------------------------------
# Response schemas
# ---------------------------------------------------------------------------
class TrackingRecordsResponse(BaseModel):
    count: int
    records: list[TrackingRecord]


class WeightResponse(BaseModel):
    weight_oz: float
    weight_lb: float
    label: str
    source: str
    has_unknown_weights: bool
    item_count: int

    @classmethod
    def from_estimate(cls, estimate: WeightEstimate) -> "WeightResponse":
        return cls(
            weight_oz=estimate.weight_oz,
            weight_lb=round(estimate.weight_lb, 2),
            label=estimate.label,
            source=estimate.source.value,
            has_unknown_weights=estimate.has_unknown_weights,
            item_count=estimate.item_count,
        )


class InventoryRollupResponse(BaseModel):
    critical: int
    low: int
    ok: int
    has_issues: bool


class InventoryResponse(BaseModel):
    order_id: str | None
    has_issues: bool
    rollup: InventoryRollupResponse
    alerts: list[InventoryAlert]

    @classmethod
    def from_report(cls, report: InventoryReport) -> "InventoryResponse":
        return cls(
            order_id=report.order_id,
            has_issues=report.has_issues,
            rollup=InventoryRollupResponse(
                critical=report.rollup.critical,
                low=report.rollup.low,
                ok=report.rollup.ok,
                has_issues=report.rollup.has_issues,
            ),
            alerts=report.alerts,
        )


class InventoryCheckResponse(BaseModel):
    reports: dict[str, InventoryResponse]
    summary: InventorySummary


class OrderSummaryResponse(BaseModel):
    id: str
    order_number: str
    status: OrderStatus
    customer_name: str
    customer_email: str
    total: float
    created_at: datetime
    tracking_number: str | None = None
    has_notes: bool
    weight: WeightResponse
    inventory: InventoryRollupResponse


class OrderSearchResponse(BaseModel):
    total: int
    active_filters: int
    status_counts: dict[str, int]
    orders: list[OrderSummaryResponse]


class StatusChangeResponse(BaseModel):
    order_id: str
    order_number: str
    from_status: OrderStatus
    to_status: OrderStatus
    tracking_number: str | None = None
    tracking_url: str | None = None
    carrier: str | None = None
    notify_customer: bool


class BatchResultResponse(BaseModel):
    operation: str
    requested: int
    succeeded: int
    failed: int
    errors: list[str]
    failed_ids: list[str]
