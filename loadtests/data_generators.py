"""Faker-based data generators for Locust load test scenarios.

The catalog seed written here is loaded by the server (CATALOG_SEED_FILE) so
provisioning requests reference products and warehouses that exist. Payloads
match the field names expected by the API's Pydantic request schemas.

Usage:
    python loadtests/data_generators.py > loadtests/catalog_seed.json
    CATALOG_SEED_FILE=loadtests/catalog_seed.json uvicorn app:app --app-dir src
"""

import json
import os
import random
import sys

from faker import Faker

fake = Faker()

VARIANT_SETS = [
    [],
    ["Small", "Medium", "Large"],
    ["Red", "Blue"],
    ["250g", "500g", "1kg"],
]


def build_seed(products: int = 50, warehouses: int = 5, seed: int = 42) -> dict:
    """Deterministic catalog of products (with and without variants) and warehouses."""
    Faker.seed(seed)
    rng = random.Random(seed)
    return {
        "products": [
            {
                "product_id": f"prod-lt-{index:04d}",
                "title": fake.catch_phrase()[:80],
                "thumbnail": f"https://img.example.com/{index:04d}.png",
                "variants": rng.choice(VARIANT_SETS),
            }
            for index in range(products)
        ],
        "warehouses": [
            {"warehouse_id": f"wh-lt-{index:02d}", "title": f"{fake.city()} DC"}
            for index in range(warehouses)
        ],
    }


def load_seed() -> dict:
    """Read the seed the server was started with, or rebuild the default one."""
    path = os.environ.get("CATALOG_SEED_FILE")
    if path and os.path.exists(path):
        with open(path, encoding="utf-8") as handle:
            return json.load(handle)
    return build_seed()


def provision_data(product: dict, warehouse_id: str, quantity: int | None = None) -> dict:
    """ProvisionStockRequest payload covering every variant the product declares."""
    names = product.get("variants") or [None]
    return {
        "product_id": product["product_id"],
        "warehouse_id": warehouse_id,
        "entries": [
            {
                "variant_name": name,
                "quantity": quantity if quantity is not None else random.randint(0, 200),
                "reorder_point": random.choice([5, 10, 20]),
            }
            for name in names
        ],
    }


def quick_adjust_data(operation: str | None = None) -> dict:
    operation = operation or random.choice(["add", "deduct"])
    return {"operation": operation, "amount": random.randint(1, 5), "note": fake.sentence(nb_words=4)}


def reason_adjust_data() -> dict:
    return {
        "amount": random.randint(1, 3),
        "reason": random.choice(["Damaged in transit", "Cycle count correction", "Lost"]),
    }


if __name__ == "__main__":
    json.dump(build_seed(), sys.stdout, indent=2)
    sys.stdout.write("\n")
