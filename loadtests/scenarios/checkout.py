"""Checkout load test scenarios.

Stateful SequentialTaskSet journeys: the happy path from cart to paid order,
a declined payment, and a client that retries verification after a timeout.
"""

import logging

from locust import SequentialTaskSet, task

from loadtests.data_generators import cart_item_data, checkout_data, load_test_user_id, verify_data
from loadtests.helpers.auth import bearer
from loadtests.helpers.response import extract_error_detail
from loadtests.helpers.state import CheckoutState

logger = logging.getLogger("loadtest")


class _CheckoutJourney(SequentialTaskSet):
    """Shared steps: fill a cart, then start checkout."""

    def on_start(self):
        self.state = CheckoutState()
        self.headers = bearer(load_test_user_id())

    def _fill_cart(self, lines: int = 2):
        for _ in range(lines):
            payload = cart_item_data()
            with self.client.post(
                "/cart/add",
                json=payload,
                headers=self.headers,
                catch_response=True,
                name="POST /cart/add",
            ) as resp:
                if resp.status_code == 200:
                    self.state.product_ids.append(payload["productId"])
                else:
                    resp.failure(f"Add to cart failed: {resp.status_code} {extract_error_detail(resp)}")
                    self.interrupt()

    def _start_checkout(self):
        with self.client.post(
            "/checkout/start",
            json=checkout_data(),
            headers=self.headers,
            catch_response=True,
            name="POST /checkout/start",
        ) as resp:
            if resp.status_code == 201:
                body = resp.json()
                self.state.payment_id = body["paymentId"]
                self.state.order_data = body["orderData"]
            else:
                resp.failure(f"Checkout start failed: {resp.status_code} {extract_error_detail(resp)}")
                self.interrupt()

    def _verify(self, status: str = "completed", name: str = "POST /payments/verify"):
        payload = verify_data(self.state.payment_id, self.state.order_data, status=status)
        with self.client.post(
            "/payments/verify",
            json=payload,
            headers=self.headers,
            catch_response=True,
            name=name,
        ) as resp:
            if resp.status_code != 200:
                resp.failure(f"Verify failed: {resp.status_code} {extract_error_detail(resp)}")
                return None
            body = resp.json()
            self.state.current_status = body["status"]
            return body


class CheckoutSuccessJourney(_CheckoutJourney):
    """Add to cart -> Start checkout -> Verify -> Fetch order.

    Generates events: CartItemAdded, PaymentInitiated, PaymentCompleted,
    OrderMaterialized, PaymentLinkedToOrder, OrderStatusChanged, CartCleared.
    """

    @task
    def fill_cart(self):
        self._fill_cart()

    @task
    def start_checkout(self):
        self._start_checkout()

    @task
    def verify(self):
        body = self._verify()
        if body:
            self.state.order_id = body["orderId"]

    @task
    def fetch_order(self):
        if not self.state.order_id:
            self.interrupt()
        with self.client.get(
            f"/orders/{self.state.order_id}",
            headers=self.headers,
            catch_response=True,
            name="GET /orders/{id}",
        ) as resp:
            if resp.status_code == 200 and resp.json()["status"] != "paid":
                resp.failure(f"Order not paid: {resp.json()['status']}")

    @task
    def done(self):
        self.interrupt()


class DeclinedPaymentJourney(_CheckoutJourney):
    """Add to cart -> Start checkout -> Verify as failed.

    The cart survives a failed payment; no order is created.
    """

    @task
    def fill_cart(self):
        self._fill_cart(lines=1)

    @task
    def start_checkout(self):
        self._start_checkout()

    @task
    def verify_failed(self):
        self._verify(status="failed", name="POST /payments/verify (failed)")

    @task
    def cart_survives(self):
        with self.client.get(
            "/cart/count", headers=self.headers, catch_response=True, name="GET /cart/count"
        ) as resp:
            if resp.status_code == 200 and resp.json()["itemCount"] == 0:
                resp.failure("Cart was cleared after a failed payment")

    @task
    def done(self):
        self.interrupt()


class RetriedVerificationJourney(_CheckoutJourney):
    """Start checkout -> Verify -> Verify again.

    Both verifications must return the same order.
    """

    @task
    def fill_cart(self):
        self._fill_cart(lines=1)

    @task
    def start_checkout(self):
        self._start_checkout()

    @task
    def verify_twice(self):
        first = self._verify()
        second = self._verify(name="POST /payments/verify (retry)")
        if first and second and first["orderId"] != second["orderId"]:
            logger.error("Retried verification produced a second order for %s", self.state.payment_id)

    @task
    def done(self):
        self.interrupt()
