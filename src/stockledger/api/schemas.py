"""Pydantic request/response schemas for the Stock API.

These are external contracts (anti-corruption layer), separate from the
StockRecord aggregate and its ledger entries.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Request Schemas
# ---------------------------------------------------------------------------
class ProvisionEntrySchema(BaseModel):
    variant_name: str | None = None  # omit for the base product
    quantity: int = Field(ge=0, default=0)
    reorder_point: int | None = Field(ge=0, default=None)


class ProvisionStockRequest(BaseModel):
    product_id: str
    warehouse_id: str
    entries: list[ProvisionEntrySchema] = Field(min_length=1)


class QuickOperation(str, Enum):
    ADD = "add"
    DEDUCT = "deduct"


class QuickAdjustRequest(BaseModel):
    operation: QuickOperation
    amount: int = Field(ge=1)
    note: str | None = None


class AdjustWithReasonRequest(BaseModel):
    amount: int = Field(ge=1)
    reason: str


class ReceiveStockRequest(BaseModel):
    amount: int = Field(ge=1)
    reference: str | None = None


class UpdateStockRequest(BaseModel):
    reorder_point: int = Field(ge=0)


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class StockRecordResponse(BaseModel):
    id: str
    product_id: str
    variant_name: str | None
    warehouse_id: str
    quantity: int
    reorder_point: int
    level: str
    is_low_stock: bool
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_record(cls, record) -> "StockRecordResponse":
        return cls(
            id=str(record.id),
            product_id=str(record.product_id),
            variant_name=record.variant.to_storage(),
            warehouse_id=str(record.warehouse_id),
            quantity=record.quantity,
            reorder_point=record.reorder_point,
            level=record.level.value,
            is_low_stock=record.is_low_stock,
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class PageMeta(BaseModel):
    total: int
    page: int
    limit: int
    total_pages: int


class StockListResponse(BaseModel):
    items: list[StockRecordResponse]
    meta: PageMeta


class AdjustmentEntryResponse(BaseModel):
    stock_id: str
    sequence: int
    operation: str
    delta: int
    previous_quantity: int
    resulting_quantity: int
    reason: str
    recorded_at: datetime


class LowStockAlertResponse(BaseModel):
    stock_id: str
    product_id: str
    variant_name: str | None
    warehouse_id: str
    quantity: int
    reorder_point: int
    level: str
    detected_at: datetime | None = None


class ErrorResponse(BaseModel):
    kind: str
    message: str
