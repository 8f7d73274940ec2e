"""FastAPI routes for the back office order screens."""

import structlog
from fastapi import APIRouter, HTTPException, Query
from fastapi.responses import Response

from backoffice.api.schemas import (
    BatchExportRequest,
    BatchResultResponse,
    BatchStatusRequest,
    InventoryCheckResponse,
    InventoryResponse,
    InventoryRollupResponse,
    OrderSearchRequest,
    OrderSearchResponse,
    OrderSummaryResponse,
    StatusChangeResponse,
    TrackingCsvRequest,
    TrackingRecordsResponse,
    UpdateStatusRequest,
    WeightResponse,
)
from backoffice.batch.processor import BatchActionProcessor, BatchResult
from backoffice.errors import (
    FormatError,
    OrderNotFoundError,
    OrderUpdateError,
    StateError,
    StockLookupError,
)
from backoffice.inventory.risk import check_order, check_orders
from backoffice.order.annotation import annotate_orders
from backoffice.order.filtering import active_filter_count, filter_orders, status_counts
from backoffice.order.fulfillment import transition_order
from backoffice.shipping.weight import estimate_weight
from backoffice.stock import get_stock_lookup
from backoffice.store import get_order_store
from backoffice.tracking.csv_parser import TEMPLATE_FILENAME, parse_tracking_csv, tracking_template

logger = structlog.get_logger(__name__)


def _batch_response(result: BatchResult) -> BatchResultResponse:
    return BatchResultResponse(
        operation=result.operation.value,
        requested=result.requested,
        succeeded=result.succeeded,
        failed=result.failed,
        errors=result.errors,
        failed_ids=result.failed_ids,
    )


def _csv_download(content: bytes | str, filename: str) -> Response:
    return Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _parse_or_400(csv_text: str):
    try:
        return parse_tracking_csv(csv_text)
    except FormatError as e:
        raise HTTPException(status_code=400, detail=e.message) from e


def _get_order_or_404(order_id: str):
    try:
        return get_order_store().get_order(order_id)
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e


# ---------------------------------------------------------------------------
# Orders Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


# ---------------------------------------------------------------------------
# Tracking import
# ---------------------------------------------------------------------------
@order_router.get("/tracking/template")
async def download_tracking_template() -> Response:
    """Download the four-column tracking import template."""
    return _csv_download(tracking_template(), TEMPLATE_FILENAME)


@order_router.post("/tracking/parse", response_model=TrackingRecordsResponse)
async def parse_tracking(body: TrackingCsvRequest) -> TrackingRecordsResponse:
    """Validate a tracking CSV and preview its records without applying them."""
    records = _parse_or_400(body.csv_text)
    return TrackingRecordsResponse(count=len(records), records=records)


@order_router.post("/tracking/import", response_model=BatchResultResponse)
async def import_tracking(body: TrackingCsvRequest) -> BatchResultResponse:
    """Ship every order named in a tracking CSV."""
    records = _parse_or_400(body.csv_text)
    result = BatchActionProcessor().import_tracking(records)
    return _batch_response(result)


# ---------------------------------------------------------------------------
# Listing and inventory
# ---------------------------------------------------------------------------
@order_router.post("/search", response_model=OrderSearchResponse)
async def search_orders(body: OrderSearchRequest) -> OrderSearchResponse:
    """Filter orders and annotate each with its weight and inventory rollup."""
    criteria = body.criteria
    orders = get_order_store().list_orders(statuses=criteria.statuses or None)
    snapshots = get_stock_lookup().stock_for_orders([order.id for order in orders])
    annotations = annotate_orders(orders, snapshots)

    rollups = {order_id: a.inventory.rollup for order_id, a in annotations.items()}
    visible = filter_orders(criteria, orders, rollups=rollups)

    summaries = []
    for order in visible:
        annotation = annotations[order.id]
        rollup = annotation.inventory.rollup
        summaries.append(
            OrderSummaryResponse(
                id=order.id,
                order_number=order.order_number,
                status=order.status,
                customer_name=order.customer_name,
                customer_email=order.customer_email,
                total=order.total,
                created_at=order.created_at,
                tracking_number=order.tracking_number,
                has_notes=order.has_notes,
                weight=WeightResponse.from_estimate(annotation.weight),
                inventory=InventoryRollupResponse(
                    critical=rollup.critical,
                    low=rollup.low,
                    ok=rollup.ok,
                    has_issues=rollup.has_issues,
                ),
            )
        )

    return OrderSearchResponse(
        total=len(summaries),
        active_filters=active_filter_count(criteria),
        status_counts={status.value: count for status, count in status_counts(visible).items()},
        orders=summaries,
    )


@order_router.get("/inventory-check", response_model=InventoryCheckResponse)
async def inventory_check(order_ids: str = Query("", description="Comma-separated order ids")) -> InventoryCheckResponse:
    """Inventory alerts for several orders at once, with a summary."""
    ids = [order_id.strip() for order_id in order_ids.split(",") if order_id.strip()]
    if not ids:
        raise HTTPException(status_code=400, detail="order_ids is required")

    store = get_order_store()
    orders = []
    for order_id in ids:
        try:
            orders.append(store.get_order(order_id))
        except OrderNotFoundError:
            logger.warning("Inventory check skipped unknown order", order_id=order_id)

    snapshots = get_stock_lookup().stock_for_orders([order.id for order in orders])
    reports, summary = check_orders(orders, snapshots)
    return InventoryCheckResponse(
        reports={order_id: InventoryResponse.from_report(report) for order_id, report in reports.items()},
        summary=summary,
    )


@order_router.get("/{order_id}/weight", response_model=WeightResponse)
async def order_weight(order_id: str) -> WeightResponse:
    """Estimated shipping weight for one order."""
    order = _get_order_or_404(order_id)
    return WeightResponse.from_estimate(estimate_weight(order.items))


@order_router.get("/{order_id}/inventory", response_model=InventoryResponse)
async def order_inventory(order_id: str) -> InventoryResponse:
    """Per-item inventory alerts for one order."""
    order = _get_order_or_404(order_id)
    try:
        snapshot = get_stock_lookup().stock_for_order(order_id)
    except StockLookupError as e:
        logger.warning("Stock data unavailable", order_id=order_id, error=str(e))
        snapshot = None
    return InventoryResponse.from_report(check_order(order, snapshot))


# ---------------------------------------------------------------------------
# Status changes
# ---------------------------------------------------------------------------
@order_router.put("/{order_id}/status", response_model=StatusChangeResponse)
async def update_order_status(order_id: str, body: UpdateStatusRequest) -> StatusChangeResponse:
    """Move one order to a new status."""
    try:
        change = transition_order(
            order_id,
            body.status,
            tracking_number=body.tracking_number,
            tracking_url=body.tracking_url,
            carrier=body.carrier,
            notes=body.notes,
        )
    except OrderNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except StateError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e
    except OrderUpdateError as e:
        raise HTTPException(status_code=502, detail=e.reason) from e

    return StatusChangeResponse(
        order_id=change.order_id,
        order_number=change.order_number,
        from_status=change.from_status,
        to_status=change.to_status,
        tracking_number=change.tracking_number,
        tracking_url=change.tracking_url,
        carrier=change.carrier,
        notify_customer=change.notify_customer,
    )


# ---------------------------------------------------------------------------
# Batch actions
# ---------------------------------------------------------------------------
@order_router.post("/batch/status", response_model=BatchResultResponse)
async def batch_update_status(body: BatchStatusRequest) -> BatchResultResponse:
    """Update the status of many orders; each order succeeds or fails on its own."""
    result = BatchActionProcessor().update_status(body.order_ids, body.status)
    return _batch_response(result)


@order_router.post("/batch/export")
async def batch_export(body: BatchExportRequest) -> Response:
    """Export the selected orders as a single CSV download."""
    result = BatchActionProcessor().export(body.order_ids, body.export_format)
    if result.artifact is None:
        raise HTTPException(status_code=400, detail=result.errors[0] if result.errors else "Export failed")
    return _csv_download(result.artifact.content, result.artifact.filename)
