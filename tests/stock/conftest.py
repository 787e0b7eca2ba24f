import pytest
from protean.integrations.pytest import DomainFixture

from stockledger.collaborators import get_catalog, get_warehouse_directory


@pytest.fixture(scope="session")
def stockledger_bed():
    from stockledger.domain import stockledger

    bed = DomainFixture(stockledger)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(stockledger_bed):
    with stockledger_bed.domain_context():
        yield


@pytest.fixture()
def catalog():
    """In-memory catalog with a variant product (T-shirt) and a plain product (Mug)."""
    catalog = get_catalog()
    catalog.register_product(
        "prod-shirt",
        "T-Shirt",
        thumbnail="https://img.example.com/shirt.png",
        variants=["Small", "Medium", "Large"],
    )
    catalog.register_product("prod-mug", "Coffee Mug")
    return catalog


@pytest.fixture()
def warehouses():
    directory = get_warehouse_directory()
    directory.register_warehouse("wh-east", "East DC")
    directory.register_warehouse("wh-west", "West DC")
    return directory
