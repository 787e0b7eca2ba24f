"""Tests for settings, error descriptions, keyed locks and the collaborator adapters."""

import json
import threading

import pytest
from protean.exceptions import ObjectNotFoundError, ValidationError
from structlog.testing import capture_logs

from stockledger.collaborators import get_catalog, get_warehouse_directory, reset_collaborators
from stockledger.config import LedgerSettings, get_settings, reset_settings
from stockledger.exceptions import (
    CollaboratorUnavailableError,
    InsufficientStockError,
    StoreUnavailableError,
    describe_error,
)
from stockledger.stock.locks import KeyedLocks, warn_if_multi_process


class TestSettings:
    def test_defaults(self, monkeypatch):
        for name in ("STOCK_STORE_RETRY_ATTEMPTS", "STOCK_LOCK_TIMEOUT", "STOCK_DEFAULT_REORDER_POINT"):
            monkeypatch.delenv(name, raising=False)
        settings = LedgerSettings.from_env()
        assert settings.store_retry_attempts == 3
        assert settings.lock_timeout == 10.0
        assert settings.default_reorder_point == 10

    def test_environment_overrides_are_cached_until_reset(self, monkeypatch):
        monkeypatch.setenv("STOCK_STORE_RETRY_ATTEMPTS", "5")
        reset_settings()
        assert get_settings().store_retry_attempts == 5

        monkeypatch.setenv("STOCK_STORE_RETRY_ATTEMPTS", "1")
        assert get_settings().store_retry_attempts == 5
        reset_settings()
        assert get_settings().store_retry_attempts == 1


class TestDescribeError:
    def test_stock_error(self):
        assert describe_error(InsufficientStockError(5, 2)) == {
            "kind": "InsufficientStock",
            "message": "Cannot deduct 5, only 2 in stock",
        }

    def test_protean_validation_error(self):
        body = describe_error(ValidationError({"quantity": ["Quantity cannot be negative: -1"]}))
        assert body["kind"] == "InvalidArgument"
        assert "quantity" in body["message"]

    def test_protean_not_found(self):
        assert describe_error(ObjectNotFoundError("StockRecord with id x not found"))["kind"] == "NotFound"

    def test_unexpected_error_is_internal_without_details(self):
        assert describe_error(RuntimeError("secret stack detail")) == {
            "kind": "Internal",
            "message": "Internal error",
        }


class TestKeyedLocks:
    def test_lock_is_reentrant_and_released(self):
        locks = KeyedLocks("test")
        with locks.hold("a"):
            with locks.hold("a"):
                assert locks.active_keys() == 1
        assert locks.active_keys() == 0

    def test_busy_key_times_out(self):
        locks = KeyedLocks("test")
        holding = threading.Event()
        release = threading.Event()

        def holder():
            with locks.hold("a"):
                holding.set()
                release.wait(5)

        thread = threading.Thread(target=holder)
        thread.start()
        holding.wait(5)
        try:
            with pytest.raises(StoreUnavailableError):
                with locks.hold("a", timeout=0.05):
                    pass
            # Other keys are not blocked
            with locks.hold("b", timeout=0.05):
                pass
        finally:
            release.set()
            thread.join(5)
        assert locks.active_keys() == 0

    def test_hold_many_releases_every_key(self):
        locks = KeyedLocks("test")
        with locks.hold_many(["b", "a", "a"]):
            assert locks.active_keys() == 2
        assert locks.active_keys() == 0

    @pytest.mark.parametrize("environ", [{}, {"WEB_CONCURRENCY": "1"}, {"WEB_CONCURRENCY": "auto"}])
    def test_single_worker_is_quiet(self, environ):
        with capture_logs() as logs:
            assert warn_if_multi_process(environ) is False
        assert logs == []

    def test_multiple_workers_are_flagged(self):
        with capture_logs() as logs:
            assert warn_if_multi_process({"WEB_CONCURRENCY": "4"}) is True
        (entry,) = logs
        assert entry["log_level"] == "warning"
        assert entry["workers"] == 4


class TestCollaborators:
    def test_adapters_are_singletons(self):
        assert get_catalog() is get_catalog()
        assert get_warehouse_directory() is get_warehouse_directory()

    def test_unknown_adapter(self, monkeypatch):
        monkeypatch.setenv("CATALOG_ADAPTER", "graphql")
        reset_collaborators()
        with pytest.raises(ValueError):
            get_catalog()

    def test_unavailable_catalog_raises(self):
        catalog = get_catalog()
        catalog.configure(available=False)
        with pytest.raises(CollaboratorUnavailableError):
            catalog.get_product("prod-001")

    def test_seed_file(self, monkeypatch, tmp_path):
        seed = {
            "products": [{"product_id": "p-1", "title": "Kettle", "variants": ["Steel", "Black"]}],
            "warehouses": [{"warehouse_id": "w-1", "title": "North DC"}],
        }
        path = tmp_path / "seed.json"
        path.write_text(json.dumps(seed))
        monkeypatch.setenv("CATALOG_SEED_FILE", str(path))
        reset_collaborators()

        product = get_catalog().get_product("p-1")
        assert product.title == "Kettle"
        assert product.variants == ("Steel", "Black")
        assert product.has_variants
        assert get_warehouse_directory().get_warehouse("w-1").title == "North DC"


class TestLogging:
    def test_level_follows_environment(self, monkeypatch):
        from stockledger.utils.logging import get_log_level

        monkeypatch.delenv("LOG_LEVEL", raising=False)
        monkeypatch.delenv("ENVIRONMENT", raising=False)
        monkeypatch.setenv("PROTEAN_ENV", "production")
        assert get_log_level() == "INFO"

        monkeypatch.setenv("LOG_LEVEL", "debug")
        assert get_log_level() == "DEBUG"

    def test_log_dir_adds_rotating_files(self, monkeypatch, tmp_path):
        import logging

        from stockledger.utils.logging import setup_stdlib_logging

        root_logger = logging.getLogger()
        saved_handlers, saved_level = root_logger.handlers[:], root_logger.level
        monkeypatch.setenv("LOG_DIR", str(tmp_path))
        try:
            setup_stdlib_logging()
            assert (tmp_path / "stockledger.log").exists()
            assert (tmp_path / "stockledger_error.log").exists()
        finally:
            for handler in root_logger.handlers:
                handler.close()
            root_logger.handlers = saved_handlers
            root_logger.setLevel(saved_level)
