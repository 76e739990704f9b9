"""Payment verification — command and handler.

Verification is the one multi-aggregate step of checkout: recording the
outcome, materializing (or re-finding) the order, linking it to the payment
and marking it paid all happen in the handler's single unit of work, so they
commit together or not at all.

The payment id is the idempotency key. An order remembers the payment that
produced it; before materializing, the handler looks for an order already
carrying this payment id and re-links it instead of creating a second one.
"""

import json

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.gateway import get_gateway
from storefront.order.materializer import OrderMaterializer
from storefront.order.order import Order
from storefront.order.queries import order_for_payment
from storefront.payment.payment import Payment, PaymentStatus


@storefront.command(part_of="Payment")
class VerifyPayment:
    payment_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    provider_payment_id = String(max_length=255)
    provider_signature = String(max_length=1000)
    order_data = Text()  # JSON: checkout payload


def load_owned_payment(payment_id, customer_id) -> Payment:
    """Fetch a payment for its owner. Someone else's payment is reported as missing."""
    payment = current_domain.repository_for(Payment).get(str(payment_id))
    if str(payment.customer_id) != str(customer_id):
        raise ObjectNotFoundError({"payment": [f"Payment {payment_id} does not exist"]})
    return payment


@storefront.command_handler(part_of=Payment)
class VerifyPaymentHandler:
    @handle(VerifyPayment)
    def verify_payment(self, command):
        payment = load_owned_payment(command.payment_id, command.customer_id)
        self._record_outcome(payment, command)

        if payment.is_completed:
            order_data = json.loads(command.order_data) if command.order_data else None
            self._settle_order(payment, order_data)

        current_domain.repository_for(Payment).add(payment)
        return str(payment.id)

    def _record_outcome(self, payment, command):
        if command.status == PaymentStatus.COMPLETED.value and payment.status == PaymentStatus.PENDING.value:
            outcome = get_gateway().confirm_outcome(
                payment.provider_order_id,
                command.status,
                command.provider_payment_id,
                command.provider_signature,
            )
            if not outcome.accepted:
                payment.record_outcome(PaymentStatus.FAILED.value, failure_reason=outcome.failure_reason)
                logger.warning(
                    "Gateway rejected reported completion",
                    payment_id=str(payment.id),
                    reason=outcome.failure_reason,
                )
                return

        payment.record_outcome(
            command.status,
            provider_payment_id=command.provider_payment_id,
            provider_signature=command.provider_signature,
        )
        logger.info("Payment outcome recorded", payment_id=str(payment.id), status=payment.status)

    def _settle_order(self, payment, order_data):
        order_repo = current_domain.repository_for(Order)

        if payment.order_id:
            order = order_repo.get(payment.order_id)
        else:
            order = order_for_payment(payment.id)
            if order is not None:
                logger.info("Re-linking existing order", payment_id=str(payment.id), order_id=str(order.id))
            elif order_data is not None:
                order = OrderMaterializer().create(
                    order_data,
                    customer_id=payment.customer_id,
                    payment_id=payment.id,
                    expected_total=payment.amount,
                )
            if order is not None:
                payment.link_order(order.id)

        if order is not None and order.mark_paid():
            order_repo.add(order)
