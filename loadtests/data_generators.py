"""Faker-based data generators for Locust load test scenarios.

Payloads use the API's camelCase field names and pass the checkout
validation rules (required customer and address fields, positive prices).
"""

import random
import uuid

from faker import Faker

fake = Faker("en_IN")

# Products seeded into the catalogue when a load test starts.
SEED_PRODUCTS = [
    (f"LT-{index:03d}", f"Load Test Product {index}", round(random.uniform(49.0, 4999.0), 2))
    for index in range(1, 21)
]

PROVIDERS = ["upi", "phonepe", "paytm", "razorpay"]


def load_test_user_id() -> str:
    """User ids like 'lt-user-a1b2c3d4'. Each Locust user gets its own cart."""
    return f"lt-user-{uuid.uuid4().hex[:8]}"


def seeded_product_id() -> str:
    return random.choice(SEED_PRODUCTS)[0]


def cart_item_data(product_id: str | None = None) -> dict:
    """AddToCart payload for a seeded product."""
    return {"productId": product_id or seeded_product_id(), "quantity": random.randint(1, 3)}


def customer_data() -> dict:
    return {
        "name": fake.name()[:100],
        "email": f"{fake.user_name()[:20]}.{uuid.uuid4().hex[:4]}@{fake.free_email_domain()}",
        "phone": fake.phone_number()[:20],
    }


def address_data() -> dict:
    return {
        "line1": fake.street_address()[:255],
        "city": fake.city()[:100],
        "state": fake.state()[:100],
        "postalCode": fake.postcode()[:20],
        "country": "IN",
    }


def checkout_data() -> dict:
    """StartCheckout payload with fresh customer and address details."""
    return {
        "customer": customer_data(),
        "address": address_data(),
        "provider": random.choice(PROVIDERS),
        "shipping": random.choice([0, 40, 99]),
    }


def verify_data(payment_id: str, order_data: dict | None = None, status: str = "completed") -> dict:
    """VerifyPayment payload as a client reports it after the gateway step."""
    payload = {
        "paymentId": payment_id,
        "status": status,
        "providerPaymentId": f"pay_{uuid.uuid4().hex[:14]}",
    }
    if order_data is not None:
        payload["orderData"] = order_data
    return payload
