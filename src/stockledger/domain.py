"""StockLedger bounded context — stock records, adjustments and rollups.

Tracks on-hand quantity per (product, variant, warehouse), applies validated
adjustments with an append-only audit ledger, and projects per-product stock
summaries for the inventory dashboard.
"""

import structlog
from protean.domain import Domain

stockledger = Domain(name="stockledger")

logger = structlog.get_logger(__name__)
