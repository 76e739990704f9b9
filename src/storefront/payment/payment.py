"""Payment aggregate — one record per checkout attempt.

State Machine:
    PENDING → COMPLETED → REFUNDED
    PENDING → FAILED

PENDING is initial; FAILED and REFUNDED are terminal. COMPLETED only admits
a later refund. Recording the outcome a payment already has is a no-op, so a
client retrying verification with the same status sees the same payment.

The order reference is set at most once and never changes afterwards.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import DateTime, Float, Identifier, String, ValueObject

from storefront.domain import storefront
from storefront.payment.events import (
    PaymentCompleted,
    PaymentFailed,
    PaymentInitiated,
    PaymentLinkedToOrder,
    PaymentRefunded,
)

DEFAULT_PROVIDER = "upi"
DEFAULT_CURRENCY = "INR"


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentProvider(Enum):
    PHONEPE = "phonepe"
    PAYTM = "paytm"
    UPI = "upi"
    RAZORPAY = "razorpay"


SUPPORTED_PROVIDERS = [provider.value for provider in PaymentProvider]

_VALID_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.COMPLETED, PaymentStatus.FAILED},
    PaymentStatus.COMPLETED: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: set(),  # Terminal
    PaymentStatus.REFUNDED: set(),  # Terminal
}

# Outcomes a client may report during verification
REPORTABLE_OUTCOMES = {PaymentStatus.COMPLETED.value, PaymentStatus.FAILED.value}


@storefront.value_object(part_of="Payment")
class NextAction:
    """Advisory hint telling a UI what to present next. Carries no authority."""

    kind = String(max_length=50, required=True)  # upi_intent, redirect_url
    url = String(max_length=1000, required=True)


@storefront.aggregate
class Payment:
    customer_id = Identifier(required=True)
    order_id = Identifier()
    provider = String(choices=PaymentProvider, default=DEFAULT_PROVIDER)
    provider_order_id = String(max_length=255, required=True)
    provider_payment_id = String(max_length=255)
    provider_signature = String(max_length=1000)
    amount = Float(required=True)
    currency = String(max_length=3, default=DEFAULT_CURRENCY)
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    next_action = ValueObject(NextAction)
    failure_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def amount_must_be_positive(self):
        if self.amount is None or self.amount <= 0:
            raise ValidationError({"amount": ["Amount must be greater than zero"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def initiate(
        cls,
        customer_id,
        amount,
        currency,
        provider,
        provider_order_id,
        next_action_kind,
        next_action_url,
        order_id=None,
    ):
        now = datetime.now(UTC)
        payment = cls(
            customer_id=str(customer_id),
            order_id=str(order_id) if order_id else None,
            provider=provider,
            provider_order_id=provider_order_id,
            amount=round(float(amount), 2),
            currency=currency,
            status=PaymentStatus.PENDING.value,
            next_action=NextAction(kind=next_action_kind, url=next_action_url),
            created_at=now,
            updated_at=now,
        )
        payment.raise_(
            PaymentInitiated(
                payment_id=str(payment.id),
                customer_id=str(customer_id),
                order_id=payment.order_id,
                provider=provider,
                provider_order_id=provider_order_id,
                amount=payment.amount,
                currency=currency,
                initiated_at=now,
            )
        )
        return payment

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: PaymentStatus) -> None:
        current = PaymentStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidOperationError(f"Cannot transition payment from {current.value} to {target_status.value}")

    @property
    def is_completed(self) -> bool:
        return self.status == PaymentStatus.COMPLETED.value

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def record_outcome(self, status, provider_payment_id=None, provider_signature=None, failure_reason=None):
        """Record the verified outcome. Repeating the current outcome changes nothing."""
        if status not in REPORTABLE_OUTCOMES:
            raise ValidationError({"status": [f"Status must be one of {sorted(REPORTABLE_OUTCOMES)}"]})

        target = PaymentStatus(status)
        if PaymentStatus(self.status) == target:
            return

        self._assert_can_transition(target)

        now = datetime.now(UTC)
        self.status = target.value
        if provider_payment_id:
            self.provider_payment_id = provider_payment_id
        if provider_signature:
            self.provider_signature = provider_signature
        self.updated_at = now

        if target == PaymentStatus.COMPLETED:
            self.raise_(
                PaymentCompleted(
                    payment_id=str(self.id),
                    customer_id=str(self.customer_id),
                    amount=self.amount,
                    currency=self.currency,
                    provider_payment_id=self.provider_payment_id,
                    completed_at=now,
                )
            )
        else:
            self.failure_reason = failure_reason
            self.raise_(
                PaymentFailed(
                    payment_id=str(self.id),
                    customer_id=str(self.customer_id),
                    reason=failure_reason,
                    failed_at=now,
                )
            )

    def link_order(self, order_id) -> None:
        """Attach the materialized order. A payment is linked at most once."""
        if self.order_id:
            if str(self.order_id) == str(order_id):
                return
            raise InvalidOperationError(f"Payment {self.id} is already linked to order {self.order_id}")

        self.order_id = str(order_id)
        self.updated_at = datetime.now(UTC)
        self.raise_(PaymentLinkedToOrder(payment_id=str(self.id), order_id=str(order_id)))

    def refund(self, gateway_refund_id=None, reason=None) -> None:
        self._assert_can_transition(PaymentStatus.REFUNDED)

        now = datetime.now(UTC)
        self.status = PaymentStatus.REFUNDED.value
        self.updated_at = now
        self.raise_(
            PaymentRefunded(
                payment_id=str(self.id),
                customer_id=str(self.customer_id),
                amount=self.amount,
                reason=reason,
                gateway_refund_id=gateway_refund_id,
                refunded_at=now,
            )
        )
