"""Tests for OrderMaterializer: payload validation and order-number assignment."""

import itertools
import re
import threading
from concurrent.futures import ThreadPoolExecutor

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from storefront.domain import storefront
from storefront.exceptions import OrderNumberConflict
from storefront.order.materializer import OrderMaterializer, generate_order_number, validate_checkout_payload
from storefront.order.order import Order


def _all_orders():
    return current_domain.repository_for(Order)._dao.query.all().items


class TestGenerateOrderNumber:
    def test_format(self):
        assert re.match(r"^ORD-\d{6}-[0-9A-F]{6}$", generate_order_number())

    def test_numbers_differ(self):
        assert len({generate_order_number() for _ in range(200)}) == 200


class TestValidatePayload:
    def test_defaults_are_derived(self, order_data):
        data = validate_checkout_payload(order_data)
        assert data["pricing"] == {
            "subtotal": 500.0,
            "shipping": 0.0,
            "tax": 0.0,
            "total": 500.0,
            "currency": "INR",
        }

    def test_explicit_pricing_is_kept(self, order_data):
        order_data.update({"subtotal": 500, "shipping": 40, "tax": 90, "currency": "usd"})
        pricing = validate_checkout_payload(order_data)["pricing"]
        assert pricing["total"] == 630.0
        assert pricing["currency"] == "USD"

    def test_empty_items_rejected(self, order_data):
        order_data["items"] = []
        with pytest.raises(ValidationError) as exc:
            validate_checkout_payload(order_data)
        assert "items" in exc.value.messages

    def test_item_fields_validated(self, order_data):
        order_data["items"] = [{"product_id": "prod-A", "name": "", "price": -1, "quantity": 0}]
        with pytest.raises(ValidationError) as exc:
            validate_checkout_payload(order_data)
        assert {"items[0].name", "items[0].price", "items[0].quantity"} <= set(exc.value.messages)
        assert "items[0].product_id" not in exc.value.messages

    def test_customer_and_address_required(self, order_data):
        del order_data["customer"]["email"]
        order_data["address"]["postal_code"] = " "
        with pytest.raises(ValidationError) as exc:
            validate_checkout_payload(order_data)
        assert "customer.email" in exc.value.messages
        assert "address.postal_code" in exc.value.messages

    def test_total_must_be_positive(self, order_data):
        order_data["items"][0]["price"] = 0
        with pytest.raises(ValidationError) as exc:
            validate_checkout_payload(order_data)
        assert "total" in exc.value.messages

    def test_payload_must_be_an_object(self):
        with pytest.raises(ValidationError):
            validate_checkout_payload(["not", "a", "payload"])


class TestCreate:
    def test_creates_paid_order(self, order_data):
        order = OrderMaterializer().create(order_data, customer_id="u1", payment_id="pay-1")

        persisted = current_domain.repository_for(Order).get(order.id)
        assert persisted.status == "paid"
        assert persisted.payment_id == "pay-1"
        assert persisted.pricing.total == 500.0
        assert persisted.items[0].name == "Product A"
        assert persisted.shipping_address.postal_code == "560001"

    def test_invalid_payload_writes_nothing(self, order_data):
        order_data["items"] = []
        with pytest.raises(ValidationError):
            OrderMaterializer().create(order_data, customer_id="u1")
        assert _all_orders() == []

    def test_collision_is_retried(self, order_data):
        numbers = iter(["ORD-000001-AAAAAA", "ORD-000001-AAAAAA", "ORD-000002-BBBBBB"])
        materializer = OrderMaterializer(number_factory=lambda: next(numbers))

        first = materializer.create(order_data, customer_id="u1")
        second = materializer.create(order_data, customer_id="u2")

        assert first.order_number == "ORD-000001-AAAAAA"
        assert second.order_number == "ORD-000002-BBBBBB"

    def test_conflict_after_bounded_attempts(self, order_data):
        OrderMaterializer(number_factory=lambda: "ORD-000001-AAAAAA").create(order_data, customer_id="u1")

        calls = itertools.count()

        def always_taken():
            next(calls)
            return "ORD-000001-AAAAAA"

        with pytest.raises(OrderNumberConflict) as exc:
            OrderMaterializer(number_factory=always_taken, max_attempts=5).create(order_data, customer_id="u2")

        assert exc.value.attempts == 5
        assert next(calls) == 5
        assert len(_all_orders()) == 1

    def test_concurrent_orders_get_distinct_numbers(self, order_data):
        workers = 20
        barrier = threading.Barrier(workers)

        def worker(index):
            with storefront.domain_context():
                barrier.wait()
                return OrderMaterializer().create(order_data, customer_id=f"u{index}").order_number

        with ThreadPoolExecutor(max_workers=workers) as pool:
            numbers = list(pool.map(worker, range(workers)))

        assert len(set(numbers)) == workers
        assert len(_all_orders()) == workers
