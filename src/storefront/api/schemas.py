"""Pydantic request/response schemas for the storefront API.

These are the external JSON contracts (camelCase on the wire), kept separate
from the internal Protean commands and aggregates. Every model also accepts
snake_case field names on input.
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from storefront.payment.payment import SUPPORTED_PROVIDERS


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CustomerSchema(CamelModel):
    name: str | None = None
    email: str | None = None
    phone: str | None = None


class AddressSchema(CamelModel):
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class CheckoutItemSchema(CamelModel):
    product_id: str | None = None
    name: str | None = None
    price: float | None = None
    quantity: int | None = None
    image: str | None = None


class CheckoutPayloadSchema(CamelModel):
    """The order data a client echoes back to /payments/verify."""

    items: list[CheckoutItemSchema] = Field(default_factory=list)
    customer: CustomerSchema | None = None
    address: AddressSchema | None = None
    subtotal: float | None = None
    shipping: float | None = None
    tax: float | None = None
    total: float | None = None
    currency: str | None = None

    def to_payload(self) -> dict:
        return self.model_dump(exclude_none=True)


# ---------------------------------------------------------------------------
# Cart
# ---------------------------------------------------------------------------
class CartItemRequest(CamelModel):
    product_id: str | int
    quantity: int = 1

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={"examples": [{"productId": "prod-A", "quantity": 2}]},
    )


class UpdateCartItemRequest(CamelModel):
    product_id: str | int
    quantity: int


class RemoveCartItemRequest(CamelModel):
    product_id: str | int


class CartLineResponse(CamelModel):
    product: str
    name: str | None = None
    quantity: int
    price: float
    line_total: float
    added_at: str | None = None


class CartResponse(CamelModel):
    items: list[CartLineResponse]
    total_amount: float
    item_count: int
    revision: int

    @classmethod
    def from_cart(cls, cart) -> "CartResponse":
        return cls(
            items=[
                CartLineResponse(
                    product=str(item.product_id),
                    name=item.name,
                    quantity=item.quantity,
                    price=item.unit_price,
                    line_total=item.line_total,
                    added_at=item.added_at.isoformat() if item.added_at else None,
                )
                for item in cart.items
            ],
            total_amount=cart.total_amount or 0.0,
            item_count=cart.item_count,
            revision=cart.revision or 0,
        )


class CartCountResponse(CamelModel):
    item_count: int


# ---------------------------------------------------------------------------
# Payments
# ---------------------------------------------------------------------------
class InitiatePaymentRequest(CamelModel):
    amount: float
    currency: str | None = None
    provider: str | None = None
    order_id: str | None = None

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        json_schema_extra={"examples": [{"amount": 500, "currency": "INR", "provider": "upi"}]},
    )


class NextActionSchema(CamelModel):
    type: str
    url: str


class PaymentDescriptorResponse(CamelModel):
    payment_id: str
    status: str
    provider: str
    provider_order_id: str
    amount: float
    currency: str
    next_action: NextActionSchema | None = None
    supported_providers: list[str] = Field(default_factory=lambda: list(SUPPORTED_PROVIDERS))
    message: str = "Payment created. Complete it with your provider, then call /payments/verify."

    @classmethod
    def from_payment(cls, payment) -> "PaymentDescriptorResponse":
        next_action = None
        if payment.next_action:
            next_action = NextActionSchema(type=payment.next_action.kind, url=payment.next_action.url)
        return cls(
            payment_id=str(payment.id),
            status=payment.status,
            provider=payment.provider,
            provider_order_id=payment.provider_order_id,
            amount=payment.amount,
            currency=payment.currency,
            next_action=next_action,
        )


class VerifyPaymentRequest(CamelModel):
    payment_id: str
    status: str
    provider_payment_id: str | None = None
    provider_signature: str | None = None
    order_data: CheckoutPayloadSchema | None = None


class VerifyPaymentResponse(CamelModel):
    payment_id: str
    status: str
    provider: str
    order_id: str | None = None
    message: str

    @classmethod
    def from_payment(cls, payment) -> "VerifyPaymentResponse":
        if payment.status == "completed":
            message = "Payment completed"
        else:
            message = f"Payment {payment.status}" + (f": {payment.failure_reason}" if payment.failure_reason else "")
        return cls(
            payment_id=str(payment.id),
            status=payment.status,
            provider=payment.provider,
            order_id=str(payment.order_id) if payment.order_id else None,
            message=message,
        )


class PaymentResponse(CamelModel):
    payment_id: str
    status: str
    provider: str
    provider_order_id: str
    provider_payment_id: str | None = None
    amount: float
    currency: str
    order_id: str | None = None
    failure_reason: str | None = None
    created_at: str | None = None

    @classmethod
    def from_payment(cls, payment) -> "PaymentResponse":
        return cls(
            payment_id=str(payment.id),
            status=payment.status,
            provider=payment.provider,
            provider_order_id=payment.provider_order_id,
            provider_payment_id=payment.provider_payment_id,
            amount=payment.amount,
            currency=payment.currency,
            order_id=str(payment.order_id) if payment.order_id else None,
            failure_reason=payment.failure_reason,
            created_at=payment.created_at.isoformat() if payment.created_at else None,
        )


class RefundPaymentRequest(CamelModel):
    reason: str | None = None


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class StartCheckoutRequest(CamelModel):
    provider: str | None = None
    currency: str | None = None
    customer: CustomerSchema
    address: AddressSchema
    shipping: float = Field(default=0.0, ge=0)
    tax: float = Field(default=0.0, ge=0)


class StartCheckoutResponse(PaymentDescriptorResponse):
    order_data: CheckoutPayloadSchema


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class OrderItemResponse(CamelModel):
    product_id: str
    name: str
    price: float
    quantity: int
    image: str | None = None


class OrderResponse(CamelModel):
    id: str
    order_number: str
    status: str
    customer_id: str
    payment_id: str | None = None
    currency: str
    subtotal: float
    shipping: float
    tax: float
    total: float
    items: list[OrderItemResponse]
    customer: CustomerSchema | None = None
    address: AddressSchema | None = None
    tracking_number: str | None = None
    courier_name: str | None = None
    created_at_iso: str | None = None

    @classmethod
    def from_order(cls, order) -> "OrderResponse":
        customer = address = None
        if order.customer:
            customer = CustomerSchema(name=order.customer.name, email=order.customer.email, phone=order.customer.phone)
        if order.shipping_address:
            a = order.shipping_address
            address = AddressSchema(
                line1=a.line1,
                line2=a.line2,
                city=a.city,
                state=a.state,
                postal_code=a.postal_code,
                country=a.country,
            )
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            status=order.status,
            customer_id=str(order.customer_id),
            payment_id=str(order.payment_id) if order.payment_id else None,
            currency=order.pricing.currency,
            subtotal=order.pricing.subtotal,
            shipping=order.pricing.shipping,
            tax=order.pricing.tax,
            total=order.pricing.total,
            items=[
                OrderItemResponse(
                    product_id=str(item.product_id),
                    name=item.name,
                    price=item.price,
                    quantity=item.quantity,
                    image=item.image,
                )
                for item in order.items
            ],
            customer=customer,
            address=address,
            tracking_number=order.tracking_number,
            courier_name=order.courier_name,
            created_at_iso=order.created_at_iso,
        )


class OrderSummaryResponse(CamelModel):
    id: str
    order_number: str
    status: str
    total: float
    items: int
    created_at_iso: str | None = None

    @classmethod
    def from_order(cls, order) -> "OrderSummaryResponse":
        return cls(
            id=str(order.id),
            order_number=order.order_number,
            status=order.status,
            total=order.pricing.total,
            items=order.item_count,
            created_at_iso=order.created_at_iso,
        )


class PaginationSchema(CamelModel):
    total: int
    page: int
    limit: int
    pages: int


class OrderListResponse(CamelModel):
    data: list[OrderResponse]
    pagination: PaginationSchema


class UpdateOrderStatusRequest(CamelModel):
    status: str


class UpdateOrderTrackingRequest(CamelModel):
    tracking_number: str
    courier_name: str | None = None


# ---------------------------------------------------------------------------
# Catalogue
# ---------------------------------------------------------------------------
class PublishProductRequest(CamelModel):
    name: str
    price: float = Field(ge=0)
    status: str = "active"
    image: str | None = None


class ProductResponse(CamelModel):
    product_id: str
    name: str
    price: float
    status: str
    image: str | None = None
