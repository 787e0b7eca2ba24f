"""Stock ledger load test scenarios.

StockClerkJourney walks one record through provisioning and adjustments.
HotRecordUser has every user hammer the same record, which is where the
per-record serialization shows up as latency instead of lost updates.
"""

import random

from locust import HttpUser, SequentialTaskSet, between, task

from loadtests.data_generators import load_seed, provision_data, quick_adjust_data, reason_adjust_data
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import StockState

SEED = load_seed()
HOT_PRODUCT = next(product for product in SEED["products"] if not product.get("variants"))
HOT_WAREHOUSE_ID = SEED["warehouses"][0]["warehouse_id"]


def _locate(client, product_id, warehouse_id) -> list[str]:
    resp = client.get(
        "/stocks",
        params={"product_id": product_id, "warehouse_id": warehouse_id},
        name="GET /stocks?product_id&warehouse_id",
    )
    if resp.status_code != 200:
        return []
    return [item["id"] for item in resp.json()["items"]]


class StockClerkJourney(SequentialTaskSet):
    """Provision (or find) -> Receive -> Quick adjust -> Deduct with reason -> Summary."""

    def on_start(self):
        self.state = StockState()

    @task
    def provision(self):
        product = random.choice(SEED["products"])
        warehouse_id = random.choice(SEED["warehouses"])["warehouse_id"]
        self.state.product_id = product["product_id"]
        self.state.warehouse_id = warehouse_id

        with self.client.post(
            "/stocks",
            json=provision_data(product, warehouse_id),
            catch_response=True,
            name="POST /stocks",
        ) as resp:
            if resp.status_code == 201:
                self.state.stock_ids = [item["id"] for item in resp.json()]
            elif resp.status_code == 409:
                # Already provisioned by another user; work on the existing rows
                resp.success()
                self.state.stock_ids = _locate(self.client, product["product_id"], warehouse_id)
            else:
                resp.failure(f"Provision failed: {resp.status_code} — {extract_error_detail(resp)}")
                self.interrupt()

        if not self.state.stock_ids:
            self.interrupt()

    @task
    def receive(self):
        stock_id = random.choice(self.state.stock_ids)
        with self.client.post(
            f"/stocks/{stock_id}/receive",
            json={"amount": random.randint(10, 50), "reference": f"PO-{random.randint(1000, 9999)}"},
            catch_response=True,
            name="POST /stocks/{id}/receive",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Receive failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def quick_adjust(self):
        stock_id = random.choice(self.state.stock_ids)
        with self.client.post(
            f"/stocks/{stock_id}/adjust",
            json=quick_adjust_data(),
            catch_response=True,
            name="POST /stocks/{id}/adjust",
        ) as resp:
            if resp.status_code == 400 and resp.json().get("kind") == "InsufficientStock":
                resp.success()
            elif resp.status_code != 200:
                resp.failure(f"Quick adjust failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def adjust_with_reason(self):
        stock_id = random.choice(self.state.stock_ids)
        with self.client.post(
            f"/stocks/{stock_id}/adjust-with-reason",
            json=reason_adjust_data(),
            catch_response=True,
            name="POST /stocks/{id}/adjust-with-reason",
        ) as resp:
            if resp.status_code == 400 and resp.json().get("kind") == "InsufficientStock":
                resp.success()
            elif resp.status_code != 200:
                resp.failure(f"Adjust with reason failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def summary(self):
        with self.client.get(
            "/stocks/summary",
            params={"product_id": self.state.product_id},
            catch_response=True,
            name="GET /stocks/summary?product_id",
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Summary failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task
    def done(self):
        self.interrupt()


class StockClerkUser(HttpUser):
    wait_time = between(0.5, 2)
    tasks = [StockClerkJourney]


class HotRecordUser(HttpUser):
    """Every user adjusts the same base-product record."""

    wait_time = between(0.05, 0.2)

    def on_start(self):
        self.stock_id = None
        with self.client.post(
            "/stocks",
            json=provision_data(HOT_PRODUCT, HOT_WAREHOUSE_ID, quantity=10_000),
            catch_response=True,
            name="POST /stocks (hot)",
        ) as resp:
            if resp.status_code == 201:
                self.stock_id = resp.json()[0]["id"]
            else:
                resp.success()
        if self.stock_id is None:
            ids = _locate(self.client, HOT_PRODUCT["product_id"], HOT_WAREHOUSE_ID)
            self.stock_id = ids[0] if ids else None

    @task(5)
    def hammer(self):
        if self.stock_id is None:
            return
        with self.client.post(
            f"/stocks/{self.stock_id}/adjust",
            json=quick_adjust_data(),
            catch_response=True,
            name="POST /stocks/{hot}/adjust",
        ) as resp:
            if resp.status_code == 400 and resp.json().get("kind") == "InsufficientStock":
                resp.success()
            elif resp.status_code != 200:
                resp.failure(f"Hot adjust failed: {resp.status_code} — {extract_error_detail(resp)}")

    @task(1)
    def read_back(self):
        if self.stock_id is None:
            return
        self.client.get(f"/stocks/{self.stock_id}", name="GET /stocks/{hot}")
