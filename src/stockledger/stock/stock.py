"""StockRecord aggregate (CQRS) — on-hand quantity for one (product, variant, warehouse).

The record is the single source of truth for quantity. Every quantity change
appends an AdjustmentEntry to the record's ledger in the same persist, so the
mutation and its audit trail are committed together or not at all.

Stock level is derived, never stored:
    OutOfStock: quantity == 0
    LowStock:   0 < quantity <= reorder_point
    Healthy:    quantity > reorder_point
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String, Text

from stockledger.domain import stockledger
from stockledger.exceptions import InsufficientStockError, InvalidArgumentError
from stockledger.stock.events import (
    ReorderPointUpdated,
    StockAdjusted,
    StockLevelChanged,
    StockProvisioned,
    StockRecordRemoved,
)
from stockledger.stock.variant import Variant


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class StockLevel(Enum):
    OUT_OF_STOCK = "OutOfStock"
    LOW_STOCK = "LowStock"
    HEALTHY = "Healthy"


class AdjustmentOperation(Enum):
    ADD = "Add"
    DEDUCT = "Deduct"
    RECEIVE = "Receive"
    DEDUCT_WITH_REASON = "Deduct with reason"

    @property
    def is_deduction(self) -> bool:
        return self in (AdjustmentOperation.DEDUCT, AdjustmentOperation.DEDUCT_WITH_REASON)


def stock_level_for(quantity: int, reorder_point: int) -> StockLevel:
    if quantity == 0:
        return StockLevel.OUT_OF_STOCK
    if quantity <= reorder_point:
        return StockLevel.LOW_STOCK
    return StockLevel.HEALTHY


# ---------------------------------------------------------------------------
# Argument checks shared by the store, engine and provisioning
# ---------------------------------------------------------------------------
def _is_int(value) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def require_positive_amount(amount, field: str = "amount") -> int:
    if not _is_int(amount) or amount <= 0:
        raise InvalidArgumentError(f"{field} must be a positive integer, got {amount!r}")
    return amount


def require_non_negative(value, field: str) -> int:
    if not _is_int(value) or value < 0:
        raise InvalidArgumentError(f"{field} must be a non-negative integer, got {value!r}")
    return value


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@stockledger.entity(part_of="StockRecord")
class AdjustmentEntry:
    """One applied quantity change. Append-only: never updated or removed."""

    sequence = Integer(required=True, min_value=1)
    operation = String(required=True, choices=AdjustmentOperation)
    delta = Integer(required=True)
    previous_quantity = Integer(required=True, min_value=0)
    resulting_quantity = Integer(required=True, min_value=0)
    reason = Text(required=True)
    recorded_at = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@stockledger.aggregate
class StockRecord:
    """Quantity on hand for one product variant at one warehouse."""

    product_id = Identifier(required=True)
    variant_name = String(max_length=255)  # None for the base product
    warehouse_id = Identifier(required=True)
    quantity = Integer(default=0)
    reorder_point = Integer(default=10, min_value=0)
    adjustments = HasMany(AdjustmentEntry)
    created_at = DateTime()
    updated_at = DateTime()
    removed_at = DateTime()

    @invariant.post
    def quantity_must_not_be_negative(self):
        if self.quantity is not None and self.quantity < 0:
            raise ValidationError({"quantity": [f"Quantity cannot be negative: {self.quantity}"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, product_id, variant, warehouse_id, quantity=0, reorder_point=10):
        """Create a record for a key. Uniqueness is enforced by the store."""
        require_non_negative(quantity, "quantity")
        require_non_negative(reorder_point, "reorder_point")
        if not product_id:
            raise InvalidArgumentError("product_id is required")
        if not warehouse_id:
            raise InvalidArgumentError("warehouse_id is required")

        now = datetime.now(UTC)
        record = cls(
            product_id=product_id,
            variant_name=variant.to_storage(),
            warehouse_id=warehouse_id,
            quantity=quantity,
            reorder_point=reorder_point,
            created_at=now,
            updated_at=now,
        )
        record.raise_(
            StockProvisioned(
                stock_id=str(record.id),
                product_id=str(product_id),
                variant_name=variant.to_storage(),
                warehouse_id=str(warehouse_id),
                quantity=quantity,
                reorder_point=reorder_point,
                level=record.level.value,
                provisioned_at=now,
            )
        )
        return record

    # -------------------------------------------------------------------
    # Derived state
    # -------------------------------------------------------------------
    @property
    def variant(self) -> Variant:
        return Variant.from_storage(self.variant_name)

    @property
    def stock_key(self) -> tuple:
        return (str(self.product_id), self.variant, str(self.warehouse_id))

    @property
    def level(self) -> StockLevel:
        return stock_level_for(self.quantity, self.reorder_point)

    @property
    def is_low_stock(self) -> bool:
        return self.level == StockLevel.LOW_STOCK

    @property
    def is_out_of_stock(self) -> bool:
        return self.level == StockLevel.OUT_OF_STOCK

    @property
    def is_removed(self) -> bool:
        return self.removed_at is not None

    def ledger(self) -> list:
        """Adjustment entries in the order they were applied."""
        return sorted(self.adjustments or [], key=lambda entry: entry.sequence)

    # -------------------------------------------------------------------
    # Quantity changes
    # -------------------------------------------------------------------
    def add_stock(self, amount, operation=AdjustmentOperation.ADD, reason=None):
        """Increase quantity by ``amount`` (no upper bound)."""
        require_positive_amount(amount)
        return self._record_adjustment(operation, amount, reason or operation.value)

    def deduct_stock(self, amount, operation=AdjustmentOperation.DEDUCT, reason=None):
        """Decrease quantity by ``amount``; rejected outright if it would go negative."""
        require_positive_amount(amount)
        if amount > self.quantity:
            raise InsufficientStockError(requested=amount, available=self.quantity)
        return self._record_adjustment(operation, -amount, reason or operation.value)

    def _record_adjustment(self, operation, delta, reason):
        previous_quantity = self.quantity
        previous_level = self.level
        new_quantity = previous_quantity + delta
        if new_quantity < 0:
            raise InsufficientStockError(requested=-delta, available=previous_quantity)

        now = datetime.now(UTC)
        sequence = max((entry.sequence for entry in (self.adjustments or [])), default=0) + 1
        entry = AdjustmentEntry(
            sequence=sequence,
            operation=operation.value,
            delta=delta,
            previous_quantity=previous_quantity,
            resulting_quantity=new_quantity,
            reason=reason,
            recorded_at=now,
        )

        self.quantity = new_quantity
        self.updated_at = now
        self.add_adjustments(entry)

        self.raise_(
            StockAdjusted(
                stock_id=str(self.id),
                product_id=str(self.product_id),
                variant_name=self.variant_name,
                warehouse_id=str(self.warehouse_id),
                operation=operation.value,
                delta=delta,
                previous_quantity=previous_quantity,
                new_quantity=new_quantity,
                reason=reason,
                sequence=sequence,
                adjusted_at=now,
            )
        )
        self._announce_level_change(previous_level, now)
        return entry

    # -------------------------------------------------------------------
    # Maintenance
    # -------------------------------------------------------------------
    def update_reorder_point(self, reorder_point):
        require_non_negative(reorder_point, "reorder_point")
        previous_reorder_point = self.reorder_point
        previous_level = self.level
        now = datetime.now(UTC)

        self.reorder_point = reorder_point
        self.updated_at = now

        self.raise_(
            ReorderPointUpdated(
                stock_id=str(self.id),
                previous_reorder_point=previous_reorder_point,
                new_reorder_point=reorder_point,
                updated_at=now,
            )
        )
        self._announce_level_change(previous_level, now)

    def mark_removed(self):
        """Retire an emptied record. Remaining stock must be deducted first."""
        if self.quantity > 0:
            raise InvalidArgumentError(
                f"Cannot remove stock record with {self.quantity} units on hand; deduct them first"
            )
        now = datetime.now(UTC)
        self.removed_at = now
        self.updated_at = now
        self.raise_(
            StockRecordRemoved(
                stock_id=str(self.id),
                product_id=str(self.product_id),
                variant_name=self.variant_name,
                warehouse_id=str(self.warehouse_id),
                removed_at=now,
            )
        )

    def _announce_level_change(self, previous_level, changed_at):
        new_level = self.level
        if new_level == previous_level:
            return
        self.raise_(
            StockLevelChanged(
                stock_id=str(self.id),
                product_id=str(self.product_id),
                variant_name=self.variant_name,
                warehouse_id=str(self.warehouse_id),
                previous_level=previous_level.value,
                new_level=new_level.value,
                quantity=self.quantity,
                reorder_point=self.reorder_point,
                changed_at=changed_at,
            )
        )
