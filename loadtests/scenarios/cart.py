"""Cart contention scenario.

Every CartContentionUser shares a single customer id, so their cart updates
all land on one cart. The final item count must equal the sum of accepted
quantities, which an operator can read from GET /cart/count after the run.
"""

from locust import HttpUser, between, task

from loadtests.data_generators import seeded_product_id
from loadtests.helpers.auth import bearer

SHARED_CUSTOMER = "lt-shared-cart"


class CartContentionUser(HttpUser):
    wait_time = between(0.05, 0.2)

    def on_start(self):
        self.headers = bearer(SHARED_CUSTOMER)

    @task(5)
    def add_one(self):
        self.client.post(
            "/cart/add",
            json={"productId": seeded_product_id(), "quantity": 1},
            headers=self.headers,
            name="[CONTENTION] POST /cart/add",
        )

    @task(1)
    def read_count(self):
        self.client.get("/cart/count", headers=self.headers, name="[CONTENTION] GET /cart/count")
