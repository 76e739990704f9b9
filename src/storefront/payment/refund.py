"""Payment refund — command and handler (admin action)."""

from protean import handle
from protean.exceptions import InvalidOperationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront
from storefront.gateway import get_gateway
from storefront.payment.payment import Payment, PaymentStatus


@storefront.command(part_of="Payment")
class RefundPayment:
    payment_id = Identifier(required=True)
    reason = String(max_length=500, default="Refund requested")


@storefront.command_handler(part_of=Payment)
class RefundPaymentHandler:
    @handle(RefundPayment)
    def refund_payment(self, command):
        repo = current_domain.repository_for(Payment)
        payment = repo.get(command.payment_id)

        if payment.status != PaymentStatus.COMPLETED.value:
            raise InvalidOperationError(f"Only completed payments can be refunded (payment is {payment.status})")

        result = get_gateway().create_refund(payment.provider_order_id, payment.amount, command.reason)
        if not result.success:
            logger.warning("Gateway rejected refund", payment_id=str(payment.id), reason=result.failure_reason)
            raise InvalidOperationError(f"Refund rejected by gateway: {result.failure_reason}")

        payment.refund(gateway_refund_id=result.gateway_refund_id, reason=command.reason)
        repo.add(payment)

        logger.info("Payment refunded", payment_id=str(payment.id), amount=payment.amount)
        return str(payment.id)
