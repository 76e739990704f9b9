"""Payment initiation — command and handler."""

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.gateway import get_gateway
from storefront.order.order import Order
from storefront.payment.payment import DEFAULT_CURRENCY, DEFAULT_PROVIDER, Payment


@storefront.command(part_of="Payment")
class InitiatePayment:
    customer_id = Identifier(required=True)
    amount = Float(required=True)
    currency = String(max_length=3, default=DEFAULT_CURRENCY)
    provider = String(max_length=50, default=DEFAULT_PROVIDER)
    order_id = Identifier()


@storefront.command_handler(part_of=Payment)
class InitiatePaymentHandler:
    @handle(InitiatePayment)
    def initiate_payment(self, command):
        if command.order_id:
            try:
                order = current_domain.repository_for(Order).get(command.order_id)
            except ObjectNotFoundError as exc:
                raise ValidationError({"order_id": [f"Order {command.order_id} does not exist"]}) from exc
            if str(order.customer_id) != str(command.customer_id):
                raise ValidationError({"order_id": [f"Order {command.order_id} does not exist"]})

        intent = get_gateway().open_intent(command.provider, command.amount, command.currency)

        payment = Payment.initiate(
            customer_id=command.customer_id,
            amount=command.amount,
            currency=command.currency,
            provider=command.provider,
            provider_order_id=intent.provider_order_id,
            next_action_kind=intent.next_action_type,
            next_action_url=intent.next_action_url,
            order_id=command.order_id,
        )
        current_domain.repository_for(Payment).add(payment)

        logger.info(
            "Payment initiated",
            payment_id=str(payment.id),
            customer_id=str(command.customer_id),
            provider=command.provider,
            amount=payment.amount,
            currency=payment.currency,
        )
        return str(payment.id)
