"""Stock maintenance — reorder point edits, record removal and ledger reads.

Reorder point edits share the record lock with adjustments so a threshold
change never interleaves with a quantity change on the same record.
"""

import structlog

from stockledger.config import get_settings
from stockledger.stock.locks import record_locks
from stockledger.stock.stock import StockRecord
from stockledger.stock.store import stock_store

logger = structlog.get_logger(__name__)


def update_reorder_point(stock_id, reorder_point) -> StockRecord:
    with record_locks.hold(str(stock_id), timeout=get_settings().lock_timeout):
        record = stock_store.get_by_id(stock_id)
        previous = record.reorder_point
        record.update_reorder_point(reorder_point)
        stock_store.save(record)

    logger.info(
        "Reorder point updated",
        stock_id=str(stock_id),
        previous_reorder_point=previous,
        reorder_point=reorder_point,
    )
    return record


def remove_stock(stock_id) -> None:
    """Retire an emptied record; its key becomes free for provisioning again."""
    with record_locks.hold(str(stock_id), timeout=get_settings().lock_timeout):
        record = stock_store.get_by_id(stock_id)
        record.mark_removed()
        stock_store.save(record)

    logger.info("Stock record removed", stock_id=str(stock_id), product_id=str(record.product_id))


def adjustment_history(stock_id) -> list:
    return stock_store.get_by_id(stock_id).ledger()
