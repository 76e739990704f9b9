"""Domain events for the Payment aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from storefront.domain import storefront


@storefront.event(part_of="Payment")
class PaymentInitiated:
    """A checkout attempt opened a payment with the provider."""

    __version__ = 1

    payment_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    order_id = Identifier()
    provider = String(required=True)
    provider_order_id = String(required=True)
    amount = Float(required=True)
    currency = String(required=True)
    initiated_at = DateTime(required=True)


@storefront.event(part_of="Payment")
class PaymentCompleted:
    """The payment outcome was verified as completed."""

    __version__ = 1

    payment_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    amount = Float(required=True)
    currency = String(required=True)
    provider_payment_id = String()
    completed_at = DateTime(required=True)


@storefront.event(part_of="Payment")
class PaymentFailed:
    """The payment outcome was verified as failed."""

    __version__ = 1

    payment_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    reason = String()
    failed_at = DateTime(required=True)


@storefront.event(part_of="Payment")
class PaymentLinkedToOrder:
    """An order was attached to the payment. Happens at most once."""

    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)


@storefront.event(part_of="Payment")
class PaymentRefunded:
    """A completed payment was refunded."""

    __version__ = 1

    payment_id = Identifier(required=True)
    customer_id = Identifier(required=True)
    amount = Float(required=True)
    reason = String()
    gateway_refund_id = String()
    refunded_at = DateTime(required=True)
