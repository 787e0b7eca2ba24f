"""Stock Ledger Load Testing — Locust entry point.

Start the API with the catalog seed first so provisioning has products and
warehouses to reference:

    python loadtests/data_generators.py > loadtests/catalog_seed.json
    CATALOG_SEED_FILE=loadtests/catalog_seed.json uvicorn app:app --app-dir src

Usage:
    # All scenarios (web UI):
    CATALOG_SEED_FILE=loadtests/catalog_seed.json locust -f loadtests/locustfile.py

    # Contention on a single record:
    locust -f loadtests/locustfile.py HotRecordUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py StockClerkUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.stock import HOT_PRODUCT, HOT_WAREHOUSE_ID, HotRecordUser, StockClerkUser  # noqa: F401

logger = logging.getLogger("loadtest")


@events.request.add_listener
def on_request(request_type, name, response, exception, **_kw):
    """Log error details for every failed request."""
    if exception:
        logger.error("[EXCEPTION] %s %s: %s", request_type, name, exception)
    elif response is not None and response.status_code >= 400:
        detail = extract_error_detail(response)
        logger.error("[%s] %s %s: %s", response.status_code, request_type, name, detail)


@events.test_start.add_listener
def on_test_start(environment, **_kwargs):
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the hot record's final quantity and ledger length when the test ends."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    if not environment.host:
        return
    try:
        listing = requests.get(
            f"{environment.host}/stocks",
            params={"product_id": HOT_PRODUCT["product_id"], "warehouse_id": HOT_WAREHOUSE_ID},
            timeout=5,
        ).json()
        for item in listing.get("items", []):
            ledger = requests.get(f"{environment.host}/stocks/{item['id']}/adjustments", timeout=5).json()
            print(f"[LOADTEST] Hot record {item['id']}: quantity={item['quantity']} ledger_entries={len(ledger)}")
    except (requests.RequestException, ValueError) as e:
        print(f"[LOADTEST] Could not read hot record: {e}")
    print()
