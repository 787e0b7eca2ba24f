"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance keeps its own state; the shared hot record is found
through the API, not shared in memory.
"""

from dataclasses import dataclass, field


@dataclass
class StockState:
    """Stock records a simulated warehouse clerk is working on."""

    stock_ids: list[str] = field(default_factory=list)
    product_id: str | None = None
    warehouse_id: str | None = None
