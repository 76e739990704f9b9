"""Storefront Load Testing — Locust entry point.

Discovers all user classes from the scenarios package. The catalogue is
seeded through the admin endpoint when a test starts, so the server and
Locust must share STOREFRONT_AUTH_SECRET.

Usage:
    # All scenarios (web UI):
    locust -f loadtests/locustfile.py --host http://localhost:8000

    # Mixed workload only:
    locust -f loadtests/locustfile.py MixedWorkloadUser

    # Single-cart contention:
    locust -f loadtests/locustfile.py CartContentionUser

    # Headless (CI mode):
    locust -f loadtests/locustfile.py MixedWorkloadUser --headless \
           -u 50 -r 5 -t 300s --csv=results/loadtest
"""

import logging
import time

import requests
from locust import events

# Import all user classes so Locust discovers them
from loadtests.data_generators import SEED_PRODUCTS
from loadtests.helpers.auth import bearer
from loadtests.helpers.response import extract_error_detail
from loadtests.scenarios.cart import SHARED_CUSTOMER, CartContentionUser  # noqa: F401
from loadtests.scenarios.mixed import MixedWorkloadUser  # noqa: F401

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
    """Seed the catalogue and log a start marker."""
    print(f"\n[LOADTEST] Started at {time.strftime('%H:%M:%S')}")
    print(f"[LOADTEST] Target host: {environment.host}")

    headers = bearer("lt-admin", admin=True)
    for product_id, name, price in SEED_PRODUCTS:
        resp = requests.put(
            f"{environment.host}/catalogue/products/{product_id}",
            json={"name": name, "price": price, "status": "active"},
            headers=headers,
            timeout=5,
        )
        if resp.status_code != 200:
            logger.error("Seeding %s failed: %s", product_id, extract_error_detail(resp))
    print(f"[LOADTEST] Seeded {len(SEED_PRODUCTS)} products")
    print()


@events.test_stop.add_listener
def on_test_stop(environment, **_kwargs):
    """Print the shared cart's final count for the contention scenario."""
    print(f"\n[LOADTEST] Stopped at {time.strftime('%H:%M:%S')}")
    try:
        resp = requests.get(f"{environment.host}/cart/count", headers=bearer(SHARED_CUSTOMER), timeout=5)
        print(f"[LOADTEST] Shared cart item count: {resp.json().get('itemCount')}\n")
    except requests.RequestException as e:
        print(f"[LOADTEST] Could not fetch shared cart count: {e}\n")
