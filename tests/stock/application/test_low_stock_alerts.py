"""Tests for the LowStockAlert projection fed by stock record events."""

from protean import current_domain

from stockledger.projections.low_stock_alert import LowStockAlert, open_alerts
from stockledger.stock.adjustment import quick_adjust
from stockledger.stock.maintenance import remove_stock, update_reorder_point
from stockledger.stock.store import stock_store


def _alert_ids():
    return [str(alert.stock_id) for alert in open_alerts()]


class TestLowStockAlertProjection:
    def test_healthy_record_has_no_alert(self):
        stock_store.create("prod-001", None, "wh-001", quantity=50, reorder_point=5)
        assert open_alerts() == []

    def test_low_record_alerts_on_provisioning(self):
        record = stock_store.create("prod-001", None, "wh-001", quantity=3, reorder_point=5)

        alert = current_domain.repository_for(LowStockAlert).get(str(record.id))
        assert alert.level == "LowStock"
        assert alert.quantity == 3

    def test_alert_raised_when_crossing_reorder_point(self):
        record = stock_store.create("prod-001", None, "wh-001", quantity=10, reorder_point=5)
        quick_adjust(record.id, "Deduct", 6)

        assert _alert_ids() == [str(record.id)]
        assert open_alerts()[0].quantity == 4

    def test_alert_tracks_quantity_and_level(self):
        record = stock_store.create("prod-001", None, "wh-001", quantity=4, reorder_point=5)
        quick_adjust(record.id, "Deduct", 1)
        assert open_alerts()[0].quantity == 3

        quick_adjust(record.id, "Deduct", 3)
        assert open_alerts()[0].level == "OutOfStock"

    def test_alert_cleared_when_restocked(self):
        record = stock_store.create("prod-001", None, "wh-001", quantity=2, reorder_point=5)
        quick_adjust(record.id, "Add", 20)
        assert open_alerts() == []

    def test_reorder_point_change_raises_and_clears_alert(self):
        record = stock_store.create("prod-001", None, "wh-001", quantity=8, reorder_point=5)
        update_reorder_point(record.id, 10)
        assert _alert_ids() == [str(record.id)]
        assert open_alerts()[0].reorder_point == 10

        update_reorder_point(record.id, 3)
        assert open_alerts() == []

    def test_removed_record_drops_alert(self):
        record = stock_store.create("prod-001", None, "wh-001", quantity=0, reorder_point=5)
        assert _alert_ids() == [str(record.id)]

        remove_stock(record.id)
        assert open_alerts() == []

    def test_alerts_ordered_by_quantity(self):
        low = stock_store.create("prod-001", None, "wh-001", quantity=4, reorder_point=5)
        empty = stock_store.create("prod-002", None, "wh-001", quantity=0, reorder_point=5)
        assert _alert_ids() == [str(empty.id), str(low.id)]
