"""CheckoutOrchestrator — choreography over cart, payments and orders.

The orchestrator holds no state of its own. A checkout is:

1. ``start``: validate customer and address, quote the cart's current total
   (plus shipping and tax) and open a payment for it. The response carries a
   checkout payload built from the cart for the client to send back.
2. ``complete``: verify the payment with that payload; the ledger materializes
   and links the order. Once the payment is completed, the cart is cleared.

Clients may repeat either step or call them out of order; every step relies on
the idempotency of the component it calls.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ValidationError

from storefront.cart.store import CartStore
from storefront.order.materializer import REQUIRED_ADDRESS_FIELDS, REQUIRED_CUSTOMER_FIELDS
from storefront.payment.ledger import PaymentLedger
from storefront.payment.payment import Payment

logger = structlog.get_logger(__name__)


@dataclass
class CheckoutStarted:
    payment: Payment
    order_data: dict


def _require_fields(section_name, section, required) -> dict:
    if not isinstance(section, dict):
        raise ValidationError({section_name: [f"{section_name.capitalize()} details are required"]})

    errors = {
        f"{section_name}.{field}": [f"{field.replace('_', ' ').capitalize()} is required"]
        for field in required
        if section.get(field) is None or not str(section.get(field)).strip()
    }
    if errors:
        raise ValidationError(errors)
    return section


class CheckoutOrchestrator:
    def __init__(self, carts: CartStore | None = None, ledger: PaymentLedger | None = None) -> None:
        self.carts = carts or CartStore()
        self.ledger = ledger or PaymentLedger()

    def build_checkout_payload(self, user_id, customer, address, shipping=0.0, tax=0.0, currency=None) -> dict:
        """Snapshot the user's cart into a checkout payload for order materialization."""
        customer = _require_fields("customer", customer, REQUIRED_CUSTOMER_FIELDS)
        address = _require_fields("address", address, REQUIRED_ADDRESS_FIELDS)

        cart = self.carts.get_cart(user_id)
        if not cart.items:
            raise ValidationError({"cart": ["Cannot check out an empty cart"]})

        shipping = round(float(shipping or 0.0), 2)
        tax = round(float(tax or 0.0), 2)
        if shipping < 0 or tax < 0:
            raise ValidationError({"pricing": ["Shipping and tax cannot be negative"]})

        subtotal = cart.total_amount
        payload = {
            "items": [
                {
                    "product_id": str(item.product_id),
                    "name": item.name or str(item.product_id),
                    "price": item.unit_price,
                    "quantity": item.quantity,
                }
                for item in cart.items
            ],
            "customer": dict(customer),
            "address": dict(address),
            "subtotal": subtotal,
            "shipping": shipping,
            "tax": tax,
            "total": round(subtotal + shipping + tax, 2),
        }
        if currency:
            payload["currency"] = currency.upper()
        return payload

    def start(self, user_id, customer, address, provider=None, currency=None, shipping=0.0, tax=0.0) -> CheckoutStarted:
        order_data = self.build_checkout_payload(user_id, customer, address, shipping, tax, currency)
        payment = self.ledger.initiate(
            user_id,
            amount=order_data["total"],
            currency=currency,
            provider=provider,
        )
        logger.info(
            "Checkout started",
            customer_id=str(user_id),
            payment_id=str(payment.id),
            amount=payment.amount,
        )
        return CheckoutStarted(payment=payment, order_data=order_data)

    def complete(
        self,
        user_id,
        payment_id,
        status,
        provider_payment_id=None,
        provider_signature=None,
        order_data=None,
    ) -> Payment:
        outcome = self.ledger.verify_outcome(
            user_id,
            payment_id,
            status,
            provider_payment_id=provider_payment_id,
            provider_signature=provider_signature,
            order_data=order_data,
        )
        payment = outcome.payment
        if outcome.newly_completed:
            self.carts.clear(user_id)
            logger.info(
                "Checkout completed",
                customer_id=str(user_id),
                payment_id=str(payment.id),
                order_id=str(payment.order_id) if payment.order_id else None,
            )
        return payment
