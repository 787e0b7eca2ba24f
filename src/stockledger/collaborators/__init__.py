"""Collaborator adapters — pluggable catalog and warehouse registry lookups."""

import os

import structlog

logger = structlog.get_logger(__name__)

_catalog_instance = None
_warehouse_directory_instance = None


def _adapter_name() -> str:
    return os.environ.get("CATALOG_ADAPTER", "memory")


def _build_memory_adapters():
    """Create both in-memory adapters, seeded from CATALOG_SEED_FILE when set."""
    global _catalog_instance, _warehouse_directory_instance
    from stockledger.collaborators.memory_adapter import InMemoryCatalog, InMemoryWarehouseDirectory, load_seed

    _catalog_instance = InMemoryCatalog()
    _warehouse_directory_instance = InMemoryWarehouseDirectory()
    seed_file = os.environ.get("CATALOG_SEED_FILE")
    if seed_file:
        load_seed(_catalog_instance, _warehouse_directory_instance, seed_file)
        logger.info("Catalog seeded", seed_file=seed_file)


def _ensure_adapters():
    adapter = _adapter_name()
    if adapter != "memory":
        raise ValueError(f"Unknown catalog adapter: {adapter}")
    if _catalog_instance is None or _warehouse_directory_instance is None:
        _build_memory_adapters()


def get_catalog():
    """Return the configured catalog adapter (singleton).

    Uses the in-memory catalog by default; select another adapter with the
    CATALOG_ADAPTER environment variable.
    """
    _ensure_adapters()
    return _catalog_instance


def get_warehouse_directory():
    """Return the configured warehouse registry adapter (singleton)."""
    _ensure_adapters()
    return _warehouse_directory_instance


def reset_collaborators():
    """Reset the adapter singletons (useful for testing)."""
    global _catalog_instance, _warehouse_directory_instance
    _catalog_instance = None
    _warehouse_directory_instance = None
