"""Order aggregate — the immutable record of what was purchased.

An order is only ever materialized from a completed payment, so it starts
life in PAID rather than in an earlier "awaiting payment" stage. Items,
prices, customer and address are snapshots taken at checkout; later catalogue
or profile edits never reach a historical order. After creation only the
status and the tracking details change.

State Machine:
    PAID → CONFIRMED → PACKED → SHIPPED → OUT_FOR_DELIVERY → DELIVERED
    (forward only; skipping stages is allowed)
    PAID / CONFIRMED / PACKED → CANCELLED
    DELIVERED → RETURNED
    CANCELLED and RETURNED are terminal.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import InvalidOperationError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from storefront.domain import storefront
from storefront.order.events import OrderMaterialized, OrderStatusChanged, OrderTrackingUpdated

DEFAULT_CURRENCY = "INR"


class OrderStatus(Enum):
    PAID = "paid"
    CONFIRMED = "confirmed"
    PACKED = "packed"
    SHIPPED = "shipped"
    OUT_FOR_DELIVERY = "out_for_delivery"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    RETURNED = "returned"


# Forward fulfilment pipeline, in order
_PIPELINE = [
    OrderStatus.PAID,
    OrderStatus.CONFIRMED,
    OrderStatus.PACKED,
    OrderStatus.SHIPPED,
    OrderStatus.OUT_FOR_DELIVERY,
    OrderStatus.DELIVERED,
]


def _build_transitions():
    transitions = {status: set(_PIPELINE[index + 1 :]) for index, status in enumerate(_PIPELINE)}
    for status in (OrderStatus.PAID, OrderStatus.CONFIRMED, OrderStatus.PACKED):
        transitions[status].add(OrderStatus.CANCELLED)
    transitions[OrderStatus.DELIVERED].add(OrderStatus.RETURNED)
    transitions[OrderStatus.CANCELLED] = set()  # Terminal
    transitions[OrderStatus.RETURNED] = set()  # Terminal
    return transitions


_VALID_TRANSITIONS = _build_transitions()


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class CustomerInfo:
    """Who placed the order, as entered at checkout."""

    name = String(required=True, max_length=255)
    email = String(required=True, max_length=254)
    phone = String(max_length=30)


@storefront.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships to, captured at checkout time.

    The address stays as recorded even if the customer edits their saved
    addresses later.
    """

    line1 = String(required=True, max_length=255)
    line2 = String(max_length=255)
    city = String(required=True, max_length=100)
    state = String(required=True, max_length=100)
    postal_code = String(required=True, max_length=20)
    country = String(required=True, max_length=100)


@storefront.value_object(part_of="Order")
class OrderPricing:
    """Financial summary locked at checkout."""

    subtotal = Float(default=0.0)
    shipping = Float(default=0.0)
    tax = Float(default=0.0)
    total = Float(default=0.0)
    currency = String(max_length=3, default=DEFAULT_CURRENCY)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased product, copied from the cart line at checkout."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    image = String(max_length=1000)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    order_number = String(required=True, max_length=50, unique=True)
    customer_id = Identifier(required=True)
    payment_id = Identifier()
    status = String(choices=OrderStatus, default=OrderStatus.PAID.value)
    items = HasMany(OrderItem)
    customer = ValueObject(CustomerInfo)
    shipping_address = ValueObject(ShippingAddress)
    pricing = ValueObject(OrderPricing)
    tracking_number = String(max_length=255)
    courier_name = String(max_length=100)
    created_at_iso = String(max_length=40)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def order_must_have_items(self):
        if not self.items:
            raise ValidationError({"items": ["An order must contain at least one item"]})

    @invariant.post
    def total_must_be_positive(self):
        if self.pricing is None or self.pricing.total <= 0:
            raise ValidationError({"total": ["Order total must be greater than zero"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def materialize(cls, order_number, customer_id, items, customer, shipping_address, pricing, payment_id=None):
        """Create a paid order from validated checkout data.

        Args:
            items: List of dicts with product_id, name, price, quantity and optional image.
            customer: Dict with name, email and optional phone.
            shipping_address: Dict with line1, optional line2, city, state, postal_code, country.
            pricing: Dict with subtotal, shipping, tax, total, currency.
        """
        now = datetime.now(UTC)
        order = cls(
            order_number=order_number,
            customer_id=str(customer_id),
            payment_id=str(payment_id) if payment_id else None,
            status=OrderStatus.PAID.value,
            items=[OrderItem(**item) for item in items],
            customer=CustomerInfo(**customer),
            shipping_address=ShippingAddress(**shipping_address),
            pricing=OrderPricing(**pricing),
            created_at_iso=now.isoformat(),
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderMaterialized(
                order_id=str(order.id),
                order_number=order_number,
                customer_id=str(customer_id),
                payment_id=order.payment_id,
                item_count=order.item_count,
                total=order.pricing.total,
                currency=order.pricing.currency,
                created_at=now,
            )
        )
        return order

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status: OrderStatus) -> None:
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise InvalidOperationError(f"Cannot transition order from {current.value} to {target_status.value}")

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def mark_paid(self) -> bool:
        """Move the order to PAID unless it is already there or beyond.

        Returns True when the status changed. Repeated verification of the same
        payment therefore never regresses a shipped or cancelled order.
        """
        current = OrderStatus(self.status)
        if current not in _PIPELINE or _PIPELINE.index(current) >= _PIPELINE.index(OrderStatus.PAID):
            return False

        self._change_status(OrderStatus.PAID)
        return True

    def update_status(self, status) -> bool:
        """Apply an admin status update. Returns False when nothing changed."""
        try:
            target = OrderStatus(status)
        except ValueError as exc:
            raise ValidationError(
                {"status": [f"Unknown status {status!r}; expected one of {[s.value for s in OrderStatus]}"]}
            ) from exc

        if OrderStatus(self.status) == target:
            return False

        self._assert_can_transition(target)
        self._change_status(target)
        return True

    def update_tracking(self, tracking_number, courier_name=None) -> None:
        if not tracking_number or not str(tracking_number).strip():
            raise ValidationError({"tracking_number": ["Tracking number is required"]})

        now = datetime.now(UTC)
        self.tracking_number = str(tracking_number).strip()
        self.courier_name = courier_name
        self.updated_at = now
        self.raise_(
            OrderTrackingUpdated(
                order_id=str(self.id),
                order_number=self.order_number,
                tracking_number=self.tracking_number,
                courier_name=courier_name,
                updated_at=now,
            )
        )

    def _change_status(self, target: OrderStatus) -> None:
        previous = self.status
        now = datetime.now(UTC)
        self.status = target.value
        self.updated_at = now
        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                previous_status=previous,
                new_status=target.value,
                changed_at=now,
            )
        )
