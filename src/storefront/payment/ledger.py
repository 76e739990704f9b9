"""PaymentLedger — application-facing payment operations.

Verification and refund of one payment are serialised on the payment id, so
two retries of the same verify arrive at the handler one after the other;
the second finds the order linked by the first and creates nothing.
"""

import json
from dataclasses import dataclass
from numbers import Real

from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.payment.initiation import InitiatePayment
from storefront.payment.payment import (
    DEFAULT_CURRENCY,
    DEFAULT_PROVIDER,
    REPORTABLE_OUTCOMES,
    SUPPORTED_PROVIDERS,
    Payment,
    PaymentStatus,
)
from storefront.payment.refund import RefundPayment
from storefront.payment.verification import VerifyPayment, load_owned_payment
from storefront.utils.locks import KeyedLocks

payment_locks = KeyedLocks()


@dataclass(frozen=True)
class VerificationOutcome:
    """The payment after a verify call, with the status it had going in."""

    payment: Payment
    previous_status: str

    @property
    def newly_completed(self) -> bool:
        return self.previous_status == PaymentStatus.PENDING.value and self.payment.is_completed


def _validate_amount(amount) -> float:
    if isinstance(amount, bool) or not isinstance(amount, Real) or amount <= 0:
        raise ValidationError({"amount": ["Amount must be a number greater than zero"]})
    return round(float(amount), 2)


def _validate_provider(provider) -> str:
    provider = (provider or DEFAULT_PROVIDER).lower()
    if provider not in SUPPORTED_PROVIDERS:
        raise ValidationError({"provider": [f"Unsupported provider {provider!r}; expected one of {SUPPORTED_PROVIDERS}"]})
    return provider


class PaymentLedger:
    """Payment records and their status state machine."""

    def __init__(self, locks: KeyedLocks | None = None) -> None:
        self.locks = locks or payment_locks

    def initiate(self, user_id, amount, currency=None, provider=None, order_id=None) -> Payment:
        command = InitiatePayment(
            customer_id=str(user_id),
            amount=_validate_amount(amount),
            currency=(currency or DEFAULT_CURRENCY).upper(),
            provider=_validate_provider(provider),
            order_id=str(order_id) if order_id else None,
        )
        payment_id = current_domain.process(command, asynchronous=False)
        return current_domain.repository_for(Payment).get(payment_id)

    def verify(
        self,
        user_id,
        payment_id,
        status,
        provider_payment_id=None,
        provider_signature=None,
        order_data=None,
    ) -> Payment:
        return self.verify_outcome(
            user_id,
            payment_id,
            status,
            provider_payment_id=provider_payment_id,
            provider_signature=provider_signature,
            order_data=order_data,
        ).payment

    def verify_outcome(
        self,
        user_id,
        payment_id,
        status,
        provider_payment_id=None,
        provider_signature=None,
        order_data=None,
    ) -> VerificationOutcome:
        """Verify a payment and report whether this call completed it."""
        if status not in REPORTABLE_OUTCOMES:
            raise ValidationError({"status": [f"Status must be one of {sorted(REPORTABLE_OUTCOMES)}"]})

        command = VerifyPayment(
            payment_id=str(payment_id),
            customer_id=str(user_id),
            status=status,
            provider_payment_id=provider_payment_id,
            provider_signature=provider_signature,
            order_data=json.dumps(order_data) if order_data is not None else None,
        )
        with self.locks.hold(f"payment:{payment_id}"):
            previous_status = load_owned_payment(payment_id, user_id).status
            current_domain.process(command, asynchronous=False)
            payment = current_domain.repository_for(Payment).get(str(payment_id))
        return VerificationOutcome(payment=payment, previous_status=previous_status)

    def get(self, user_id, payment_id) -> Payment:
        return load_owned_payment(payment_id, user_id)

    def refund(self, payment_id, reason=None) -> Payment:
        command = RefundPayment(payment_id=str(payment_id), reason=reason or "Refund requested")
        with self.locks.hold(f"payment:{payment_id}"):
            current_domain.process(command, asynchronous=False)
            return current_domain.repository_for(Payment).get(str(payment_id))
