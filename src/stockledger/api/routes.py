"""FastAPI routes for stock records — provisioning, adjustments, listing and the dashboard rollup.

Endpoints are plain ``def`` so FastAPI runs them in its worker threadpool:
the engine blocks on per-record locks and must not stall the event loop.
"""

import math

from fastapi import APIRouter, Query

from stockledger.api.schemas import (
    AdjustmentEntryResponse,
    AdjustWithReasonRequest,
    ErrorResponse,
    LowStockAlertResponse,
    PageMeta,
    ProvisionStockRequest,
    QuickAdjustRequest,
    ReceiveStockRequest,
    StockListResponse,
    StockRecordResponse,
    UpdateStockRequest,
)
from stockledger.projections.low_stock_alert import open_alerts
from stockledger.rollup.summary import StockSummary, summarize
from stockledger.stock.adjustment import adjust_with_reason, quick_adjust, receive_stock
from stockledger.stock.maintenance import adjustment_history, remove_stock, update_reorder_point
from stockledger.stock.provisioning import provision
from stockledger.stock.store import stock_store

# ---------------------------------------------------------------------------
# Stock Router
# ---------------------------------------------------------------------------
ERROR_RESPONSES = {status: {"model": ErrorResponse} for status in (400, 404, 409, 500)}

stock_router = APIRouter(prefix="/stocks", tags=["stocks"], responses=ERROR_RESPONSES)


@stock_router.post("", status_code=201, response_model=list[StockRecordResponse])
def provision_stock(body: ProvisionStockRequest) -> list[StockRecordResponse]:
    records = provision(
        product_id=body.product_id,
        warehouse_id=body.warehouse_id,
        entries=[entry.model_dump() for entry in body.entries],
    )
    return [StockRecordResponse.from_record(record) for record in records]


@stock_router.get("", response_model=StockListResponse)
def list_stock(
    product_id: str | None = None,
    warehouse_id: str | None = None,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=50, ge=1, le=500),
) -> StockListResponse:
    records = stock_store.find(product_id=product_id, warehouse_id=warehouse_id)
    total = len(records)
    start = (page - 1) * limit
    return StockListResponse(
        items=[StockRecordResponse.from_record(record) for record in records[start : start + limit]],
        meta=PageMeta(total=total, page=page, limit=limit, total_pages=math.ceil(total / limit)),
    )


@stock_router.get("/summary", response_model=StockSummary)
def stock_summary(product_id: list[str] | None = Query(default=None)) -> StockSummary:
    return summarize(product_ids=product_id)


@stock_router.get("/alerts", response_model=list[LowStockAlertResponse])
def low_stock_alerts() -> list[LowStockAlertResponse]:
    return [
        LowStockAlertResponse(
            stock_id=str(alert.stock_id),
            product_id=str(alert.product_id),
            variant_name=alert.variant_name,
            warehouse_id=str(alert.warehouse_id),
            quantity=alert.quantity,
            reorder_point=alert.reorder_point,
            level=alert.level,
            detected_at=alert.detected_at,
        )
        for alert in open_alerts()
    ]


@stock_router.get("/{stock_id}", response_model=StockRecordResponse)
def get_stock(stock_id: str) -> StockRecordResponse:
    return StockRecordResponse.from_record(stock_store.get_by_id(stock_id))


@stock_router.patch("/{stock_id}", response_model=StockRecordResponse)
def update_stock(stock_id: str, body: UpdateStockRequest) -> StockRecordResponse:
    return StockRecordResponse.from_record(update_reorder_point(stock_id, body.reorder_point))


@stock_router.delete("/{stock_id}", status_code=204)
def delete_stock(stock_id: str) -> None:
    remove_stock(stock_id)


@stock_router.get("/{stock_id}/adjustments", response_model=list[AdjustmentEntryResponse])
def list_adjustments(stock_id: str) -> list[AdjustmentEntryResponse]:
    return [
        AdjustmentEntryResponse(
            stock_id=stock_id,
            sequence=entry.sequence,
            operation=entry.operation,
            delta=entry.delta,
            previous_quantity=entry.previous_quantity,
            resulting_quantity=entry.resulting_quantity,
            reason=entry.reason,
            recorded_at=entry.recorded_at,
        )
        for entry in adjustment_history(stock_id)
    ]


@stock_router.post("/{stock_id}/adjust", response_model=StockRecordResponse)
def adjust_stock(stock_id: str, body: QuickAdjustRequest) -> StockRecordResponse:
    record = quick_adjust(stock_id, body.operation.value, body.amount, note=body.note)
    return StockRecordResponse.from_record(record)


@stock_router.post("/{stock_id}/adjust-with-reason", response_model=StockRecordResponse)
def adjust_stock_with_reason(stock_id: str, body: AdjustWithReasonRequest) -> StockRecordResponse:
    return StockRecordResponse.from_record(adjust_with_reason(stock_id, body.amount, body.reason))


@stock_router.post("/{stock_id}/receive", response_model=StockRecordResponse)
def receive(stock_id: str, body: ReceiveStockRequest) -> StockRecordResponse:
    return StockRecordResponse.from_record(receive_stock(stock_id, body.amount, reference=body.reference))
