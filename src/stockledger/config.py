"""Runtime settings for the stock ledger, read from the environment.

Protean's own configuration (providers, event processing) lives in
``domain.toml``; these are the knobs specific to stock handling.
"""

import os
from dataclasses import dataclass

_settings = None


@dataclass(frozen=True)
class LedgerSettings:
    store_retry_attempts: int = 3
    store_retry_backoff: float = 0.05  # seconds, multiplied by the attempt number
    lock_timeout: float = 10.0  # seconds
    default_reorder_point: int = 10
    unknown_product_title: str = "Unknown product"
    unknown_warehouse_name: str = "Unknown warehouse"

    @classmethod
    def from_env(cls) -> "LedgerSettings":
        return cls(
            store_retry_attempts=max(1, int(os.getenv("STOCK_STORE_RETRY_ATTEMPTS", "3"))),
            store_retry_backoff=float(os.getenv("STOCK_STORE_RETRY_BACKOFF", "0.05")),
            lock_timeout=float(os.getenv("STOCK_LOCK_TIMEOUT", "10")),
            default_reorder_point=int(os.getenv("STOCK_DEFAULT_REORDER_POINT", "10")),
            unknown_product_title=os.getenv("STOCK_UNKNOWN_PRODUCT_TITLE", "Unknown product"),
            unknown_warehouse_name=os.getenv("STOCK_UNKNOWN_WAREHOUSE_NAME", "Unknown warehouse"),
        )


def get_settings() -> LedgerSettings:
    """Return the process-wide settings (read once from the environment)."""
    global _settings
    if _settings is None:
        _settings = LedgerSettings.from_env()
    return _settings


def reset_settings():
    """Forget cached settings so the next call re-reads the environment (useful for testing)."""
    global _settings
    _settings = None
