"""Repository for the StockRecord aggregate — composite-key and filtered lookups."""

from stockledger.domain import stockledger
from stockledger.stock.stock import StockRecord

_PAGE_SIZE = 500


@stockledger.repository(part_of=StockRecord)
class StockRecordRepository:
    """Queries over live (not removed) stock records.

    Results are ordered by creation time so callers see rows in the order they
    were provisioned.
    """

    def _all(self, **criteria) -> list[StockRecord]:
        query = self._dao.query.filter(**criteria) if criteria else self._dao.query
        items, offset = [], 0
        while True:
            page = query.offset(offset).limit(_PAGE_SIZE).all().items
            items.extend(page)
            if len(page) < _PAGE_SIZE:
                return items
            offset += _PAGE_SIZE

    def live_records(self, product_id=None, warehouse_id=None) -> list[StockRecord]:
        criteria = {}
        if product_id is not None:
            criteria["product_id"] = str(product_id)
        if warehouse_id is not None:
            criteria["warehouse_id"] = str(warehouse_id)
        records = [record for record in self._all(**criteria) if record.removed_at is None]
        return sorted(records, key=lambda record: (record.created_at, str(record.id)))

    def find_by_key(self, product_id, variant, warehouse_id) -> StockRecord | None:
        for record in self.live_records(product_id=product_id, warehouse_id=warehouse_id):
            if record.variant == variant:
                return record
        return None
