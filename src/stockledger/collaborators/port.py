"""Collaborator ports — catalog and warehouse lookups consumed by the stock core.

The stock core never owns product or warehouse data. It programs against these
ports; adapters are swapped via configuration. A missing entry is reported as
``None``. Adapters raise ``CollaboratorUnavailableError`` when the lookup itself
cannot be performed.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class ProductInfo:
    product_id: str
    title: str
    thumbnail: str | None = None
    variants: tuple[str, ...] = field(default_factory=tuple)  # declared order

    @property
    def has_variants(self) -> bool:
        return bool(self.variants)


@dataclass(frozen=True)
class WarehouseInfo:
    warehouse_id: str
    title: str


class CatalogPort(ABC):
    """Read-only view of the product catalog."""

    @abstractmethod
    def get_product(self, product_id: str) -> ProductInfo | None:
        """Return display data and declared variant names, or None if the product is gone."""
        ...


class WarehouseDirectoryPort(ABC):
    """Read-only view of the warehouse registry."""

    @abstractmethod
    def get_warehouse(self, warehouse_id: str) -> WarehouseInfo | None:
        ...
