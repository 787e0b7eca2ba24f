"""StockRecord store — keyed storage for stock rows on top of the Protean repository.

The store is the only place that talks to the repository. It enforces
(product, variant, warehouse) uniqueness under a per-key lock, translates
repository misses into ``NotFoundError`` and retries reads that fail on
transient connectivity errors. Writes are not retried: a failed commit is
reported to the caller rather than replayed.

Quantity changes must go through ``stockledger.stock.adjustment``; ``save`` is
public only for the engine, provisioning and maintenance.
"""

import time

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from stockledger.config import get_settings
from stockledger.exceptions import DuplicateKeyError, NotFoundError, StoreUnavailableError
from stockledger.stock.locks import key_locks
from stockledger.stock.stock import StockRecord
from stockledger.stock.variant import Variant

logger = structlog.get_logger(__name__)

TRANSIENT_STORE_ERRORS = (ConnectionError, TimeoutError)


def as_variant(variant) -> Variant:
    """Accept a Variant, a variant name, or None (base product)."""
    if isinstance(variant, Variant):
        return variant
    return Variant.from_storage(variant)


def stock_key(product_id, variant, warehouse_id) -> tuple:
    return (str(product_id), as_variant(variant), str(warehouse_id))


class StockRecordStore:
    @property
    def repository(self):
        return current_domain.repository_for(StockRecord)

    # -------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------
    def _read(self, action, fn, *args, **kwargs):
        settings = get_settings()
        for attempt in range(1, settings.store_retry_attempts + 1):
            try:
                return fn(*args, **kwargs)
            except TRANSIENT_STORE_ERRORS as exc:
                if attempt == settings.store_retry_attempts:
                    logger.error("Stock store unavailable", action=action, attempts=attempt, error=str(exc))
                    raise StoreUnavailableError(f"Stock store unavailable during {action}") from exc
                logger.warning("Retrying stock store read", action=action, attempt=attempt, error=str(exc))
                time.sleep(settings.store_retry_backoff * attempt)

    def get_by_id(self, stock_id) -> StockRecord:
        try:
            record = self._read("get", self.repository.get, str(stock_id))
        except ObjectNotFoundError as exc:
            raise NotFoundError(f"Stock record {stock_id} not found") from exc
        if record.is_removed:
            raise NotFoundError(f"Stock record {stock_id} not found")
        return record

    def find(self, product_id=None, warehouse_id=None, product_ids=None) -> list[StockRecord]:
        records = self._read(
            "find",
            self.repository.live_records,
            product_id=product_id,
            warehouse_id=warehouse_id,
        )
        if product_ids is not None:
            wanted = {str(pid) for pid in product_ids}
            records = [record for record in records if str(record.product_id) in wanted]
        return records

    def find_by_key(self, product_id, variant, warehouse_id) -> StockRecord | None:
        return self._read(
            "find_by_key",
            self.repository.find_by_key,
            str(product_id),
            as_variant(variant),
            str(warehouse_id),
        )

    # -------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------
    def create(self, product_id, variant, warehouse_id, quantity, reorder_point) -> StockRecord:
        """Create a record; fails with DuplicateKeyError if the key is already stocked."""
        key = stock_key(product_id, variant, warehouse_id)
        with key_locks.hold(key, timeout=get_settings().lock_timeout):
            if self.find_by_key(*key) is not None:
                raise DuplicateKeyError(
                    f"Stock already exists for product {key[0]}, variant {key[1]}, warehouse {key[2]}"
                )
            record = StockRecord.create(
                product_id=key[0],
                variant=key[1],
                warehouse_id=key[2],
                quantity=quantity,
                reorder_point=reorder_point,
            )
            self.save(record)
        logger.info(
            "Stock record created",
            stock_id=str(record.id),
            product_id=key[0],
            variant=str(key[1]),
            warehouse_id=key[2],
            quantity=quantity,
        )
        return record

    def save(self, record: StockRecord) -> StockRecord:
        try:
            self.repository.add(record)
        except TRANSIENT_STORE_ERRORS as exc:
            logger.error("Stock store write failed", stock_id=str(record.id), error=str(exc))
            raise StoreUnavailableError(f"Could not save stock record {record.id}") from exc
        return record

    def discard(self, record: StockRecord) -> None:
        """Hard-delete a record written by a batch that is being rolled back."""
        self.repository._dao.delete(record)


stock_store = StockRecordStore()
