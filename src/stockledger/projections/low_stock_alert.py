"""Low stock alerts — records currently at or below their reorder point.

Fed by the notifications a StockRecord publishes after each committed change.
A convenience view for purchasing; the stock records stay authoritative.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer, String
from protean.utils.globals import current_domain

from stockledger.domain import stockledger
from stockledger.stock.events import (
    ReorderPointUpdated,
    StockAdjusted,
    StockLevelChanged,
    StockProvisioned,
    StockRecordRemoved,
)
from stockledger.stock.stock import StockLevel, StockRecord
from stockledger.stock.store import stock_store

_PAGE_SIZE = 500
_ALERT_LEVELS = {StockLevel.LOW_STOCK.value, StockLevel.OUT_OF_STOCK.value}


@stockledger.projection
class LowStockAlert:
    stock_id = Identifier(identifier=True, required=True)
    product_id = Identifier(required=True)
    variant_name = String()
    warehouse_id = Identifier(required=True)
    quantity = Integer(default=0)
    reorder_point = Integer(default=0)
    level = String(required=True)
    detected_at = DateTime()


def _drop(repo, stock_id):
    try:
        alert = repo.get(stock_id)
    except ObjectNotFoundError:
        return
    repo._dao.delete(alert)


@stockledger.projector(projector_for=LowStockAlert, aggregates=[StockRecord])
class LowStockAlertProjector:
    @on(StockProvisioned)
    def on_stock_provisioned(self, event):
        if event.level not in _ALERT_LEVELS:
            return
        current_domain.repository_for(LowStockAlert).add(
            LowStockAlert(
                stock_id=event.stock_id,
                product_id=event.product_id,
                variant_name=event.variant_name,
                warehouse_id=event.warehouse_id,
                quantity=event.quantity,
                reorder_point=event.reorder_point,
                level=event.level,
                detected_at=event.provisioned_at,
            )
        )

    @on(StockLevelChanged)
    def on_stock_level_changed(self, event):
        repo = current_domain.repository_for(LowStockAlert)
        if event.new_level not in _ALERT_LEVELS:
            _drop(repo, event.stock_id)
            return

        try:
            alert = repo.get(event.stock_id)
            alert.quantity = event.quantity
            alert.reorder_point = event.reorder_point
            alert.level = event.new_level
            alert.detected_at = event.changed_at
        except ObjectNotFoundError:
            alert = LowStockAlert(
                stock_id=event.stock_id,
                product_id=event.product_id,
                variant_name=event.variant_name,
                warehouse_id=event.warehouse_id,
                quantity=event.quantity,
                reorder_point=event.reorder_point,
                level=event.new_level,
                detected_at=event.changed_at,
            )
        repo.add(alert)

    @on(StockRecordRemoved)
    def on_stock_record_removed(self, event):
        _drop(current_domain.repository_for(LowStockAlert), event.stock_id)

    @on(StockAdjusted)
    def on_stock_adjusted(self, event):
        """Keep the quantity current while the record stays low."""
        repo = current_domain.repository_for(LowStockAlert)
        try:
            alert = repo.get(event.stock_id)
        except ObjectNotFoundError:
            return
        alert.quantity = event.new_quantity
        repo.add(alert)

    @on(ReorderPointUpdated)
    def on_reorder_point_updated(self, event):
        repo = current_domain.repository_for(LowStockAlert)
        try:
            alert = repo.get(event.stock_id)
        except ObjectNotFoundError:
            return
        alert.reorder_point = event.new_reorder_point
        repo.add(alert)


def open_alerts() -> list[LowStockAlert]:
    """Alerts for records that still exist, lowest quantity first.

    Rows left behind by a rolled-back provisioning batch have no live record
    and are skipped.
    """
    query = current_domain.repository_for(LowStockAlert)._dao.query
    alerts, offset = [], 0
    while True:
        page = query.offset(offset).limit(_PAGE_SIZE).all().items
        alerts.extend(page)
        if len(page) < _PAGE_SIZE:
            break
        offset += _PAGE_SIZE

    live_ids = {str(record.id) for record in stock_store.find()}
    return sorted(
        (alert for alert in alerts if str(alert.stock_id) in live_ids),
        key=lambda alert: (alert.quantity, str(alert.stock_id)),
    )
