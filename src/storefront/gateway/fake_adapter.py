"""Configurable fake payment gateway for development and testing.

No external calls are made. Provider references are generated locally and,
by default, every client-reported completion is accepted. Tests can
configure the gateway to reject outcomes or refunds.
"""

import time
from collections import deque
from uuid import uuid4

from storefront.gateway.port import IntentResult, OutcomeResult, PaymentGateway, RefundResult

# Providers that hand the customer off to a UPI app rather than a hosted page
UPI_INTENT_PROVIDERS = {"upi", "phonepe"}

CHECKOUT_BASE_URL = "https://example.invalid/pay"

# Only the most recent calls are kept for inspection
MAX_RECORDED_CALLS = 100


def generate_provider_reference(provider: str) -> str:
    """Opaque reference in the shape `<provider>_<epoch-ms>_<8 hex>`."""
    return f"{provider}_{int(time.time() * 1000)}_{uuid4().hex[:8]}"


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, max_recorded_calls: int = MAX_RECORDED_CALLS) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment declined by provider"
        self.calls: deque[dict] = deque(maxlen=max_recorded_calls)

    def configure(self, should_succeed: bool, failure_reason: str = "Payment declined by provider") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def open_intent(self, provider: str, amount: float, currency: str) -> IntentResult:
        self.calls.append({"method": "open_intent", "provider": provider, "amount": amount, "currency": currency})

        reference = generate_provider_reference(provider)
        return IntentResult(
            provider_order_id=reference,
            next_action_type="upi_intent" if provider in UPI_INTENT_PROVIDERS else "redirect_url",
            next_action_url=f"{CHECKOUT_BASE_URL}/{reference}",
        )

    def confirm_outcome(
        self,
        provider_order_id: str,
        reported_status: str,
        provider_payment_id: str | None,
        provider_signature: str | None,
    ) -> OutcomeResult:
        self.calls.append(
            {
                "method": "confirm_outcome",
                "provider_order_id": provider_order_id,
                "reported_status": reported_status,
                "provider_payment_id": provider_payment_id,
                "provider_signature": provider_signature,
            }
        )

        if self.should_succeed:
            return OutcomeResult(accepted=True)
        return OutcomeResult(accepted=False, failure_reason=self.failure_reason)

    def create_refund(self, provider_order_id: str, amount: float, reason: str) -> RefundResult:
        self.calls.append(
            {"method": "create_refund", "provider_order_id": provider_order_id, "amount": amount, "reason": reason}
        )

        if self.should_succeed:
            return RefundResult(success=True, gateway_refund_id=f"fake_ref_{uuid4().hex[:12]}")
        return RefundResult(success=False, failure_reason=self.failure_reason)
