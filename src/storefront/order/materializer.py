"""OrderMaterializer — turns a checkout payload into a persisted, paid Order.

The payload is validated up front so a malformed checkout fails with field
level messages before anything is written. Order numbers combine a time
derived prefix with a random suffix; a collision with an existing order is
retried a bounded number of times before giving up with OrderNumberConflict.
"""

import secrets
import time
from collections.abc import Callable
from numbers import Real

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.exceptions import OrderNumberConflict
from storefront.order.order import DEFAULT_CURRENCY, Order

logger = structlog.get_logger(__name__)

MAX_NUMBER_ATTEMPTS = 5

REQUIRED_CUSTOMER_FIELDS = ("name", "email")
REQUIRED_ADDRESS_FIELDS = ("line1", "city", "state", "postal_code", "country")


def generate_order_number() -> str:
    """`ORD-<last 6 digits of epoch ms>-<6 uppercase hex>`."""
    millis = str(int(time.time() * 1000))[-6:]
    return f"ORD-{millis}-{secrets.token_hex(3).upper()}"


def _is_number(value) -> bool:
    return isinstance(value, Real) and not isinstance(value, bool)


def _blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def _money(value) -> float:
    return round(float(value), 2)


def _validate_items(raw_items, errors) -> list[dict]:
    if not isinstance(raw_items, list) or not raw_items:
        errors["items"] = ["At least one item is required"]
        return []

    items = []
    for index, raw in enumerate(raw_items):
        prefix = f"items[{index}]"
        if not isinstance(raw, dict):
            errors[prefix] = ["Item must be an object"]
            continue

        if _blank(raw.get("product_id")):
            errors[f"{prefix}.product_id"] = ["Product id is required"]
        if _blank(raw.get("name")):
            errors[f"{prefix}.name"] = ["Name is required"]
        price = raw.get("price")
        if not _is_number(price) or price < 0:
            errors[f"{prefix}.price"] = ["Price must be a non-negative number"]
        quantity = raw.get("quantity")
        if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity < 1:
            errors[f"{prefix}.quantity"] = ["Quantity must be a positive integer"]

        if not any(key.startswith(prefix) for key in errors):
            items.append(
                {
                    "product_id": str(raw["product_id"]),
                    "name": raw["name"],
                    "price": _money(price),
                    "quantity": quantity,
                    "image": raw.get("image"),
                }
            )
    return items


def _validate_section(raw, section, required, errors) -> dict:
    if not isinstance(raw, dict):
        errors[section] = [f"{section.replace('_', ' ').capitalize()} is required"]
        return {}
    for field in required:
        if _blank(raw.get(field)):
            errors[f"{section}.{field}"] = [f"{field.replace('_', ' ').capitalize()} is required"]
    return raw


def _validate_amount(payload, key, default, errors):
    value = payload.get(key)
    if value is None:
        return default
    if not _is_number(value) or value < 0:
        errors[key] = [f"{key.capitalize()} must be a non-negative number"]
        return default
    return _money(value)


def validate_checkout_payload(payload) -> dict:
    """Validate and normalise a checkout payload, filling in derived pricing.

    Missing subtotal defaults to Σ price × quantity, missing shipping and tax
    to zero, missing total to their sum, and missing currency to INR.
    """
    if not isinstance(payload, dict):
        raise ValidationError({"order_data": ["Checkout payload must be an object"]})

    errors: dict[str, list[str]] = {}
    items = _validate_items(payload.get("items"), errors)
    customer = _validate_section(payload.get("customer"), "customer", REQUIRED_CUSTOMER_FIELDS, errors)
    address = _validate_section(payload.get("address"), "address", REQUIRED_ADDRESS_FIELDS, errors)

    computed_subtotal = _money(sum(item["price"] * item["quantity"] for item in items))
    subtotal = _validate_amount(payload, "subtotal", computed_subtotal, errors)
    shipping = _validate_amount(payload, "shipping", 0.0, errors)
    tax = _validate_amount(payload, "tax", 0.0, errors)
    total = _validate_amount(payload, "total", _money(subtotal + shipping + tax), errors)
    if "total" not in errors and total <= 0:
        errors["total"] = ["Total must be greater than zero"]

    currency = payload.get("currency") or DEFAULT_CURRENCY
    if not isinstance(currency, str) or len(currency) != 3:
        errors["currency"] = ["Currency must be a 3-letter code"]

    if errors:
        raise ValidationError(errors)

    return {
        "items": items,
        "customer": {
            "name": customer["name"],
            "email": customer["email"],
            "phone": customer.get("phone"),
        },
        "shipping_address": {
            "line1": address["line1"],
            "line2": address.get("line2"),
            "city": address["city"],
            "state": address["state"],
            "postal_code": address["postal_code"],
            "country": address["country"],
        },
        "pricing": {
            "subtotal": subtotal,
            "shipping": shipping,
            "tax": tax,
            "total": total,
            "currency": currency.upper(),
        },
    }


class OrderMaterializer:
    """Creates orders from checkout payloads."""

    def __init__(
        self,
        number_factory: Callable[[], str] = generate_order_number,
        max_attempts: int = MAX_NUMBER_ATTEMPTS,
    ) -> None:
        self.number_factory = number_factory
        self.max_attempts = max_attempts

    def create(self, payload, customer_id, payment_id=None, expected_total=None) -> Order:
        """Validate the payload, assign a unique order number and persist the order.

        With ``expected_total`` (the amount actually paid) the payload total must
        match it to the cent.
        """
        data = validate_checkout_payload(payload)
        if expected_total is not None and _money(data["pricing"]["total"]) != _money(expected_total):
            raise ValidationError(
                {"total": [f"Order total does not match the paid amount {_money(expected_total)}"]}
            )
        repo = current_domain.repository_for(Order)

        order_number = self._assign_number(repo)
        order = Order.materialize(
            order_number=order_number,
            customer_id=customer_id,
            payment_id=payment_id,
            **data,
        )
        repo.add(order)

        logger.info(
            "Order materialized",
            order_id=str(order.id),
            order_number=order_number,
            customer_id=str(customer_id),
            payment_id=str(payment_id) if payment_id else None,
            total=order.pricing.total,
        )
        return order

    def _assign_number(self, repo) -> str:
        for attempt in range(1, self.max_attempts + 1):
            candidate = self.number_factory()
            taken = repo._dao.query.filter(order_number=candidate).all().items
            if not taken:
                return candidate
            logger.warning("Order number collision, retrying", order_number=candidate, attempt=attempt)

        logger.error("Order number assignment exhausted", attempts=self.max_attempts)
        raise OrderNumberConflict(self.max_attempts)
