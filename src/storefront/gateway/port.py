"""Payment gateway port (abstract interface).

Defines the contract a payment provider adapter must implement. The ledger
only talks to this interface, so a real provider integration is a new
adapter, not a change to the payment state machine.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class IntentResult:
    """Provider-side handle for a freshly opened payment."""

    provider_order_id: str
    next_action_type: str
    next_action_url: str


@dataclass(frozen=True)
class OutcomeResult:
    """Gateway's verdict on a client-reported payment outcome."""

    accepted: bool
    failure_reason: str | None = None


@dataclass(frozen=True)
class RefundResult:
    """Result of a refund attempt."""

    success: bool
    gateway_refund_id: str | None = None
    failure_reason: str | None = None


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def open_intent(self, provider: str, amount: float, currency: str) -> IntentResult:
        """Open a payment with the provider and return its reference and next action."""
        ...

    @abstractmethod
    def confirm_outcome(
        self,
        provider_order_id: str,
        reported_status: str,
        provider_payment_id: str | None,
        provider_signature: str | None,
    ) -> OutcomeResult:
        """Check a client-reported outcome against the provider."""
        ...

    @abstractmethod
    def create_refund(self, provider_order_id: str, amount: float, reason: str) -> RefundResult:
        """Refund a completed payment."""
        ...
