"""Adjustment engine — the only path that changes a record's quantity.

Every operation loads the record, validates, applies the change and commits the
record together with its new ledger entry while holding the record's lock, so
concurrent adjustments of one record are applied one after another against the
latest committed quantity. Adjustments of different records do not contend.

Rejected requests (unknown id, bad amount or reason, insufficient stock) are
raised to the caller and never queued or retried.
"""

import structlog

from stockledger.config import get_settings
from stockledger.exceptions import InvalidArgumentError, StockLedgerError
from stockledger.stock.locks import record_locks
from stockledger.stock.stock import AdjustmentOperation, StockRecord, require_positive_amount
from stockledger.stock.store import stock_store

logger = structlog.get_logger(__name__)


def _locked_update(stock_id, action, mutate) -> StockRecord:
    """Run ``mutate(record)`` as one atomic read-validate-write under the record lock."""
    with record_locks.hold(str(stock_id), timeout=get_settings().lock_timeout):
        record = stock_store.get_by_id(stock_id)
        try:
            mutate(record)
        except StockLedgerError as exc:
            logger.info(
                "Stock adjustment rejected",
                stock_id=str(stock_id),
                action=action,
                kind=exc.kind,
                reason=exc.message,
            )
            raise
        stock_store.save(record)
        return record


def _parse_operation(operation) -> AdjustmentOperation:
    if isinstance(operation, AdjustmentOperation):
        parsed = operation
    else:
        try:
            parsed = AdjustmentOperation(str(operation).strip().capitalize())
        except ValueError as exc:
            raise InvalidArgumentError(f"Unknown operation {operation!r}; expected Add or Deduct") from exc
    if parsed not in (AdjustmentOperation.ADD, AdjustmentOperation.DEDUCT):
        raise InvalidArgumentError(f"Quick adjustments only support Add or Deduct, got {parsed.value}")
    return parsed


def quick_adjust(stock_id, operation, amount, note=None) -> StockRecord:
    """Nudge quantity up (Add) or down (Deduct) by ``amount``.

    The ledger reason defaults to the operation name; a caller note replaces it.
    Deducting more than is on hand fails with InsufficientStockError and leaves
    the record untouched.
    """
    operation = _parse_operation(operation)
    require_positive_amount(amount)
    reason = note.strip() if note and note.strip() else operation.value

    def mutate(record):
        if operation == AdjustmentOperation.ADD:
            record.add_stock(amount, operation=operation, reason=reason)
        else:
            record.deduct_stock(amount, operation=operation, reason=reason)

    record = _locked_update(stock_id, operation.value, mutate)
    logger.info(
        "Stock quick-adjusted",
        stock_id=str(record.id),
        operation=operation.value,
        amount=amount,
        quantity=record.quantity,
    )
    return record


def adjust_with_reason(stock_id, amount, reason) -> StockRecord:
    """Deduct ``amount`` for damage, loss or correction; ``reason`` is mandatory."""
    if reason is None or not str(reason).strip():
        raise InvalidArgumentError("Reason is required for stock adjustments")
    require_positive_amount(amount)
    reason = str(reason).strip()

    record = _locked_update(
        stock_id,
        AdjustmentOperation.DEDUCT_WITH_REASON.value,
        lambda rec: rec.deduct_stock(amount, operation=AdjustmentOperation.DEDUCT_WITH_REASON, reason=reason),
    )
    logger.info(
        "Stock deducted with reason",
        stock_id=str(record.id),
        amount=amount,
        reason=reason,
        quantity=record.quantity,
    )
    return record


def receive_stock(stock_id, amount, reference=None) -> StockRecord:
    """Book an incoming shipment into an existing record."""
    require_positive_amount(amount)
    reason = f"Received ({reference})" if reference else AdjustmentOperation.RECEIVE.value

    record = _locked_update(
        stock_id,
        AdjustmentOperation.RECEIVE.value,
        lambda rec: rec.add_stock(amount, operation=AdjustmentOperation.RECEIVE, reason=reason),
    )
    logger.info(
        "Stock received",
        stock_id=str(record.id),
        amount=amount,
        reference=reference,
        quantity=record.quantity,
    )
    return record
