import os
from pathlib import Path

import pytest


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Select the config environment before the stockledger domain is initialized by its DomainFixture.
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ.setdefault("CATALOG_ADAPTER", "memory")
    os.environ.setdefault("STOCK_STORE_RETRY_BACKOFF", "0")


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = Path(item.fspath)

        if "/domain/" in str(test_path):
            item.add_marker(pytest.mark.domain)
        elif "/application/" in str(test_path):
            item.add_marker(pytest.mark.application)
        elif "/integration/" in str(test_path):
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from stockledger.collaborators import reset_collaborators
    from stockledger.config import reset_settings
    from stockledger.domain import stockledger
    from stockledger.stock.locks import key_locks, record_locks

    with stockledger.domain_context():
        # Clear all databases
        for _, provider in stockledger.providers.items():
            provider._data_reset()

        # Drain event stores
        stockledger.event_store.store._data_reset()

    reset_collaborators()
    reset_settings()
    record_locks.clear()
    key_locks.clear()
