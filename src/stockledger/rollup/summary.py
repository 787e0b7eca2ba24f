"""Rollup aggregator — per-product stock summaries for the inventory dashboard.

A pure read-side projection: every call reads the live stock records and
groups them product → variant → warehouse. Nothing is stored. A summary taken
while an adjustment is in flight may show that one record before or after the
change.

Products or warehouses missing from their registries still appear, with
placeholder display data, so one stale reference never hides the rest of the
dashboard.
"""

from collections import OrderedDict

import structlog
from pydantic import BaseModel, ConfigDict

from stockledger.collaborators import get_catalog, get_warehouse_directory
from stockledger.config import get_settings
from stockledger.exceptions import CollaboratorUnavailableError
from stockledger.stock.stock import StockLevel
from stockledger.stock.store import stock_store

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Read models
# ---------------------------------------------------------------------------
class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


class WarehouseStock(_Frozen):
    stock_id: str
    warehouse_id: str
    warehouse_name: str
    quantity: int
    reorder_point: int
    is_low_stock: bool
    level: str


class VariantStock(_Frozen):
    variant_name: str | None
    total_stock: int
    has_low_stock: bool
    has_out_of_stock: bool
    warehouses: list[WarehouseStock]


class ProductDisplay(_Frozen):
    title: str
    thumbnail: str | None = None
    variants: list[str] = []
    is_missing: bool = False


class ProductStockSummary(_Frozen):
    product_id: str
    product: ProductDisplay
    variants: list[VariantStock]
    total_stock: int
    variant_count: int
    warehouse_count: int
    has_low_stock: bool
    has_out_of_stock: bool


class StockStats(_Frozen):
    total_products: int
    low_stock_count: int
    out_of_stock_count: int


class StockSummary(_Frozen):
    products: list[ProductStockSummary]
    stats: StockStats


# ---------------------------------------------------------------------------
# Display data lookups
# ---------------------------------------------------------------------------
class _DisplayLookup:
    """Memoized catalog/warehouse lookups for one summarize() call."""

    def __init__(self):
        self.catalog = get_catalog()
        self.warehouses = get_warehouse_directory()
        self.settings = get_settings()
        self._products = {}
        self._warehouse_names = {}

    def product(self, product_id: str) -> ProductDisplay:
        if product_id not in self._products:
            self._products[product_id] = self._load_product(product_id)
        return self._products[product_id]

    def _load_product(self, product_id):
        try:
            info = self.catalog.get_product(product_id)
        except CollaboratorUnavailableError as exc:
            info = None
            logger.warning("PartialCatalogData", source="catalog", product_id=product_id, error=str(exc))
        else:
            if info is None:
                logger.warning("PartialCatalogData", source="catalog", product_id=product_id, error="not found")
        if info is None:
            return ProductDisplay(title=self.settings.unknown_product_title, is_missing=True)
        return ProductDisplay(title=info.title, thumbnail=info.thumbnail, variants=list(info.variants))

    def warehouse_name(self, warehouse_id: str) -> str:
        if warehouse_id not in self._warehouse_names:
            self._warehouse_names[warehouse_id] = self._load_warehouse_name(warehouse_id)
        return self._warehouse_names[warehouse_id]

    def _load_warehouse_name(self, warehouse_id):
        try:
            info = self.warehouses.get_warehouse(warehouse_id)
        except CollaboratorUnavailableError as exc:
            info = None
            logger.warning("PartialCatalogData", source="warehouses", warehouse_id=warehouse_id, error=str(exc))
        else:
            if info is None:
                logger.warning(
                    "PartialCatalogData", source="warehouses", warehouse_id=warehouse_id, error="not found"
                )
        return info.title if info is not None else self.settings.unknown_warehouse_name


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------
def _warehouse_row(record, lookup: _DisplayLookup) -> WarehouseStock:
    level = record.level
    return WarehouseStock(
        stock_id=str(record.id),
        warehouse_id=str(record.warehouse_id),
        warehouse_name=lookup.warehouse_name(str(record.warehouse_id)),
        quantity=record.quantity,
        reorder_point=record.reorder_point,
        is_low_stock=level == StockLevel.LOW_STOCK,
        level=level.value,
    )


def _ordered_variant_groups(records, declared: list[str]) -> list:
    """Group a product's records by variant: declared order first, then discovery order."""
    groups = OrderedDict()
    for record in records:
        groups.setdefault(record.variant, []).append(record)

    rank = {name: position for position, name in enumerate(declared)}
    discovery = {variant: position for position, variant in enumerate(groups)}

    def sort_key(variant):
        if variant.name in rank:
            return (0, rank[variant.name])
        return (1, discovery[variant])

    return [(variant, groups[variant]) for variant in sorted(groups, key=sort_key)]


def _summarize_product(product_id, records, lookup: _DisplayLookup) -> ProductStockSummary:
    display = lookup.product(product_id)
    variants = []
    for variant, variant_records in _ordered_variant_groups(records, display.variants):
        rows = [_warehouse_row(record, lookup) for record in variant_records]
        variants.append(
            VariantStock(
                variant_name=variant.to_storage(),
                total_stock=sum(row.quantity for row in rows),
                has_low_stock=any(row.is_low_stock for row in rows),
                has_out_of_stock=any(row.quantity == 0 for row in rows),
                warehouses=rows,
            )
        )

    return ProductStockSummary(
        product_id=product_id,
        product=display,
        variants=variants,
        total_stock=sum(variant.total_stock for variant in variants),
        variant_count=len(variants),
        warehouse_count=len({str(record.warehouse_id) for record in records}),
        has_low_stock=any(variant.has_low_stock for variant in variants),
        has_out_of_stock=any(variant.has_out_of_stock for variant in variants),
    )


def summarize(product_ids=None) -> StockSummary:
    """Roll up live stock records, optionally restricted to ``product_ids``.

    Products without any stock record are not provisioned yet and do not
    appear. Low/out-of-stock counters count products, not rows.
    """
    records = stock_store.find(product_ids=product_ids)

    by_product = OrderedDict()
    for record in records:
        by_product.setdefault(str(record.product_id), []).append(record)

    lookup = _DisplayLookup()
    products = [_summarize_product(product_id, group, lookup) for product_id, group in by_product.items()]
    products.sort(key=lambda summary: (summary.product.title.lower(), summary.product_id))

    stats = StockStats(
        total_products=len(products),
        low_stock_count=sum(1 for summary in products if summary.has_low_stock),
        out_of_stock_count=sum(1 for summary in products if summary.has_out_of_stock),
    )
    return StockSummary(products=products, stats=stats)
