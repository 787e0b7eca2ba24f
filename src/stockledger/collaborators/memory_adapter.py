"""In-memory catalog and warehouse adapters for development and testing."""

import json
import threading

from stockledger.collaborators.port import CatalogPort, ProductInfo, WarehouseDirectoryPort, WarehouseInfo
from stockledger.exceptions import CollaboratorUnavailableError


class InMemoryCatalog(CatalogPort):
    def __init__(self):
        self._products: dict[str, ProductInfo] = {}
        self._lock = threading.Lock()
        self.available = True

    def configure(self, available: bool = True):
        """Simulate an unreachable catalog when ``available`` is False."""
        self.available = available

    def register_product(self, product_id, title, thumbnail=None, variants=()) -> ProductInfo:
        product = ProductInfo(
            product_id=str(product_id),
            title=title,
            thumbnail=thumbnail,
            variants=tuple(variants or ()),
        )
        with self._lock:
            self._products[str(product_id)] = product
        return product

    def remove_product(self, product_id) -> None:
        with self._lock:
            self._products.pop(str(product_id), None)

    def get_product(self, product_id):
        if not self.available:
            raise CollaboratorUnavailableError("Catalog unavailable")
        with self._lock:
            return self._products.get(str(product_id))


class InMemoryWarehouseDirectory(WarehouseDirectoryPort):
    def __init__(self):
        self._warehouses: dict[str, WarehouseInfo] = {}
        self._lock = threading.Lock()

    def register_warehouse(self, warehouse_id, title) -> WarehouseInfo:
        warehouse = WarehouseInfo(warehouse_id=str(warehouse_id), title=title)
        with self._lock:
            self._warehouses[str(warehouse_id)] = warehouse
        return warehouse

    def remove_warehouse(self, warehouse_id) -> None:
        with self._lock:
            self._warehouses.pop(str(warehouse_id), None)

    def get_warehouse(self, warehouse_id):
        with self._lock:
            return self._warehouses.get(str(warehouse_id))


def load_seed(catalog: InMemoryCatalog, warehouses: InMemoryWarehouseDirectory, path) -> None:
    """Register the products and warehouses listed in a JSON seed file.

    Shape: ``{"products": [{"product_id", "title", "thumbnail"?, "variants"?}],
    "warehouses": [{"warehouse_id", "title"}]}``
    """
    with open(path, encoding="utf-8") as handle:
        seed = json.load(handle)
    for product in seed.get("products", []):
        catalog.register_product(**product)
    for warehouse in seed.get("warehouses", []):
        warehouses.register_warehouse(**warehouse)
