"""Domain events for the StockRecord aggregate.

Events are raised by the aggregate and dispatched only after the record (with
its ledger entry) has been committed, so consumers never observe a change that
was rolled back.
"""

from protean.fields import DateTime, Identifier, Integer, String, Text

from stockledger.domain import stockledger


@stockledger.event(part_of="StockRecord")
class StockProvisioned:
    """A stock record was created for a (product, variant, warehouse) key."""

    __version__ = 1

    stock_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_name = String()  # None for the base product
    warehouse_id = Identifier(required=True)
    quantity = Integer(required=True)
    reorder_point = Integer(required=True)
    level = String(required=True)
    provisioned_at = DateTime(required=True)


@stockledger.event(part_of="StockRecord")
class StockAdjusted:
    """Quantity changed through the adjustment engine; mirrors the ledger entry."""

    __version__ = 1

    stock_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_name = String()
    warehouse_id = Identifier(required=True)
    operation = String(required=True)
    delta = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    reason = Text(required=True)
    sequence = Integer(required=True)
    adjusted_at = DateTime(required=True)


@stockledger.event(part_of="StockRecord")
class StockLevelChanged:
    """The derived level (OutOfStock / LowStock / Healthy) of a record moved."""

    __version__ = 1

    stock_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_name = String()
    warehouse_id = Identifier(required=True)
    previous_level = String(required=True)
    new_level = String(required=True)
    quantity = Integer(required=True)
    reorder_point = Integer(required=True)
    changed_at = DateTime(required=True)


@stockledger.event(part_of="StockRecord")
class ReorderPointUpdated:
    __version__ = 1

    stock_id = Identifier(required=True)
    previous_reorder_point = Integer(required=True)
    new_reorder_point = Integer(required=True)
    updated_at = DateTime(required=True)


@stockledger.event(part_of="StockRecord")
class StockRecordRemoved:
    """An emptied record was retired; its key may be provisioned again."""

    __version__ = 1

    stock_id = Identifier(required=True)
    product_id = Identifier(required=True)
    variant_name = String()
    warehouse_id = Identifier(required=True)
    removed_at = DateTime(required=True)
