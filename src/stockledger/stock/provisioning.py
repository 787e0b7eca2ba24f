"""Stock provisioning — first-time stocking of a product (and its variants) in a warehouse.

A batch is all-or-nothing: every key in the batch is locked and checked before
anything is written, and rows already written are discarded if a later write
fails.
"""

from dataclasses import dataclass

import structlog

from stockledger.collaborators import get_catalog, get_warehouse_directory
from stockledger.config import get_settings
from stockledger.exceptions import DuplicateKeyError, InvalidArgumentError, NotFoundError
from stockledger.stock.locks import key_locks
from stockledger.stock.stock import require_non_negative
from stockledger.stock.store import as_variant, stock_key, stock_store
from stockledger.stock.variant import Variant

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProvisionEntry:
    variant: Variant
    quantity: int
    reorder_point: int

    @classmethod
    def build(cls, variant_name=None, quantity=0, reorder_point=None) -> "ProvisionEntry":
        if reorder_point is None:
            reorder_point = get_settings().default_reorder_point
        return cls(
            variant=as_variant(variant_name),
            quantity=require_non_negative(quantity, "quantity"),
            reorder_point=require_non_negative(reorder_point, "reorder_point"),
        )


def _check_variant_policy(product, entries: list[ProvisionEntry]) -> None:
    """Entries must match the variant dimension the catalog declares for the product."""
    seen = set()
    for entry in entries:
        if entry.variant in seen:
            raise InvalidArgumentError(f"Variant {entry.variant} appears more than once in the batch")
        seen.add(entry.variant)

    if product.has_variants:
        declared = set(product.variants)
        for entry in entries:
            if entry.variant.is_base:
                raise InvalidArgumentError(
                    f"Product {product.product_id} has variants; stock must be provisioned per variant"
                )
            if entry.variant.name not in declared:
                raise InvalidArgumentError(
                    f"Variant {entry.variant.name!r} is not declared for product {product.product_id}"
                )
    elif len(entries) != 1 or not entries[0].variant.is_base:
        raise InvalidArgumentError(
            f"Product {product.product_id} has no variants; provide exactly one base-product entry"
        )


def provision(product_id, warehouse_id, entries) -> list:
    """Create the stock records for ``entries`` of one product in one warehouse."""
    entries = [
        entry if isinstance(entry, ProvisionEntry) else ProvisionEntry.build(**entry) for entry in (entries or [])
    ]
    if not entries:
        raise InvalidArgumentError("At least one stock entry is required")

    product = get_catalog().get_product(str(product_id))
    if product is None:
        raise NotFoundError(f"Product {product_id} not found")
    if get_warehouse_directory().get_warehouse(str(warehouse_id)) is None:
        raise NotFoundError(f"Warehouse {warehouse_id} not found")

    _check_variant_policy(product, entries)

    keys = [stock_key(product_id, entry.variant, warehouse_id) for entry in entries]
    created = []
    with key_locks.hold_many(keys, timeout=get_settings().lock_timeout):
        # Fail the whole batch on the first collision, before anything is written
        for key in keys:
            if stock_store.find_by_key(*key) is not None:
                logger.info(
                    "Provisioning rejected, stock already exists",
                    product_id=key[0],
                    variant=str(key[1]),
                    warehouse_id=key[2],
                )
                raise DuplicateKeyError(
                    f"Stock already exists for product {key[0]}, variant {key[1]}, warehouse {key[2]}"
                )

        try:
            for key, entry in zip(keys, entries, strict=True):
                created.append(
                    stock_store.create(
                        *key,
                        quantity=entry.quantity,
                        reorder_point=entry.reorder_point,
                    )
                )
        except Exception:
            for record in created:
                stock_store.discard(record)
            logger.error(
                "Provisioning rolled back",
                product_id=str(product_id),
                warehouse_id=str(warehouse_id),
                discarded=len(created),
            )
            raise

    logger.info(
        "Stock provisioned",
        product_id=str(product_id),
        warehouse_id=str(warehouse_id),
        records=len(created),
    )
    return created
