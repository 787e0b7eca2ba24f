"""Tests for the StockRecord store — keyed creation, lookups and read retries."""

import pytest

from stockledger.exceptions import DuplicateKeyError, NotFoundError, StoreUnavailableError
from stockledger.stock.store import StockRecordStore, stock_store
from stockledger.stock.variant import Variant


def _create(product_id="prod-001", variant=None, warehouse_id="wh-001", quantity=10, reorder_point=5):
    return stock_store.create(product_id, variant, warehouse_id, quantity=quantity, reorder_point=reorder_point)


class TestCreate:
    def test_create_persists_record(self):
        record = _create(variant="Large")
        loaded = stock_store.get_by_id(record.id)

        assert loaded.product_id == "prod-001"
        assert loaded.variant == Variant.named("Large")
        assert loaded.quantity == 10
        assert loaded.reorder_point == 5

    def test_duplicate_key_rejected(self):
        _create(variant="Large")
        with pytest.raises(DuplicateKeyError):
            _create(variant="Large", quantity=99)

        records = stock_store.find(product_id="prod-001")
        assert len(records) == 1
        assert records[0].quantity == 10

    def test_base_and_named_variant_are_distinct_keys(self):
        _create(variant=None)
        _create(variant="Large")
        assert len(stock_store.find(product_id="prod-001")) == 2

    def test_same_variant_in_another_warehouse_is_distinct(self):
        _create(variant="Large", warehouse_id="wh-001")
        _create(variant="Large", warehouse_id="wh-002")
        assert len(stock_store.find(product_id="prod-001")) == 2

    def test_removed_record_frees_its_key(self):
        record = _create(quantity=0)
        record.mark_removed()
        stock_store.save(record)

        replacement = _create(quantity=4)
        assert replacement.id != record.id
        assert stock_store.find_by_key("prod-001", None, "wh-001").id == replacement.id


class TestLookups:
    def test_get_unknown_id_is_not_found(self):
        with pytest.raises(NotFoundError) as exc_info:
            stock_store.get_by_id("does-not-exist")
        assert exc_info.value.kind == "NotFound"

    def test_get_removed_record_is_not_found(self):
        record = _create(quantity=0)
        record.mark_removed()
        stock_store.save(record)

        with pytest.raises(NotFoundError):
            stock_store.get_by_id(record.id)

    def test_find_by_key(self):
        record = _create(variant="Small")
        assert stock_store.find_by_key("prod-001", "Small", "wh-001").id == record.id
        assert stock_store.find_by_key("prod-001", Variant.named("Small"), "wh-001").id == record.id
        assert stock_store.find_by_key("prod-001", None, "wh-001") is None

    def test_find_filters(self):
        _create(product_id="prod-001", warehouse_id="wh-001")
        _create(product_id="prod-001", warehouse_id="wh-002")
        _create(product_id="prod-002", warehouse_id="wh-001")

        assert len(stock_store.find()) == 3
        assert len(stock_store.find(product_id="prod-001")) == 2
        assert len(stock_store.find(warehouse_id="wh-001")) == 2
        assert len(stock_store.find(product_id="prod-001", warehouse_id="wh-002")) == 1
        assert len(stock_store.find(product_ids=["prod-002"])) == 1
        assert stock_store.find(product_id="prod-404") == []


class TestReadRetries:
    def test_transient_failures_are_retried(self, monkeypatch):
        record = _create()
        store = StockRecordStore()
        real_get = store.repository.get
        calls = {"count": 0}

        class FlakyRepository:
            def get(self, identifier):
                calls["count"] += 1
                if calls["count"] < 3:
                    raise ConnectionError("connection reset")
                return real_get(identifier)

        monkeypatch.setattr(StockRecordStore, "repository", property(lambda self: FlakyRepository()))

        assert store.get_by_id(record.id).id == record.id
        assert calls["count"] == 3

    def test_exhausted_retries_raise_internal_error(self, monkeypatch):
        class DownRepository:
            def get(self, identifier):
                raise TimeoutError("store timed out")

        monkeypatch.setattr(StockRecordStore, "repository", property(lambda self: DownRepository()))

        with pytest.raises(StoreUnavailableError) as exc_info:
            StockRecordStore().get_by_id("any")
        assert exc_info.value.kind == "Internal"
