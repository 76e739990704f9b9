"""Shopping Cart aggregate — one persistent cart per user.

The cart id is the owning user's id. `total_amount` is derived: every
mutation recomputes it from the lines, and a post-invariant rejects any
state where it disagrees with Σ quantity × unit_price. Prices are
snapshotted when a product is first added; later catalogue changes do not
reprice existing lines.
"""

from datetime import UTC, datetime

from protean import atomic_change, invariant
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import CartCleared, CartItemAdded, CartItemQuantityChanged, CartItemRemoved
from storefront.domain import storefront


def _money(value) -> float:
    return round(float(value), 2)


@storefront.entity(part_of="ShoppingCart")
class CartItem:
    product_id = Identifier(required=True)
    name = String(max_length=255)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    added_at = DateTime()

    @property
    def line_total(self) -> float:
        return _money(self.quantity * self.unit_price)


@storefront.aggregate
class ShoppingCart:
    customer_id = Identifier(required=True)
    items = HasMany(CartItem)
    total_amount = Float(default=0.0)
    revision = Integer(default=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_matches_lines(self):
        expected = _money(sum(item.quantity * item.unit_price for item in self.items))
        if _money(self.total_amount or 0.0) != expected:
            raise ValidationError({"total_amount": [f"Cart total must equal the sum of its lines ({expected})"]})

    @invariant.post
    def one_line_per_product(self):
        product_ids = [str(item.product_id) for item in self.items]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"items": ["A product can appear only once in the cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, customer_id):
        now = datetime.now(UTC)
        return cls(
            id=str(customer_id),
            customer_id=str(customer_id),
            total_amount=0.0,
            revision=0,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def find_item(self, product_id):
        return next((i for i in self.items if str(i.product_id) == str(product_id)), None)

    @property
    def item_count(self) -> int:
        return sum(item.quantity for item in self.items)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, unit_price, name=None):
        """Add a product, or increase its quantity if it is already in the cart.

        A repeat add keeps the price captured on the first add.
        """
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be a positive integer"]})

        now = datetime.now(UTC)
        existing = self.find_item(product_id)

        with atomic_change(self):
            if existing:
                existing.quantity += quantity
                line = existing
            else:
                line = CartItem(
                    product_id=str(product_id),
                    name=name,
                    quantity=quantity,
                    unit_price=_money(unit_price),
                    added_at=now,
                )
                self.add_items(line)
            self._touch(now)

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                product_id=str(product_id),
                quantity_added=quantity,
                line_quantity=line.quantity,
                unit_price=line.unit_price,
                total_amount=self.total_amount,
            )
        )

    def update_item(self, product_id, quantity):
        """Replace a line's quantity. Zero removes the line."""
        if quantity < 0:
            raise ValidationError({"quantity": ["Quantity cannot be negative"]})

        item = self.find_item(product_id)
        if item is None:
            raise ObjectNotFoundError({"product_id": [f"Product {product_id} is not in the cart"]})

        if quantity == 0:
            self.remove_item(product_id)
            return

        previous_quantity = item.quantity
        now = datetime.now(UTC)
        with atomic_change(self):
            item.quantity = quantity
            self._touch(now)

        self.raise_(
            CartItemQuantityChanged(
                cart_id=str(self.id),
                product_id=str(product_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
                total_amount=self.total_amount,
            )
        )

    def remove_item(self, product_id):
        item = self.find_item(product_id)
        if item is None:
            raise ObjectNotFoundError({"product_id": [f"Product {product_id} is not in the cart"]})

        now = datetime.now(UTC)
        with atomic_change(self):
            self.remove_items(item)
            self._touch(now)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
                total_amount=self.total_amount,
            )
        )

    def clear(self):
        """Empty the cart. Clearing an empty cart changes nothing."""
        if not self.items:
            return

        removed = len(self.items)
        now = datetime.now(UTC)
        with atomic_change(self):
            for item in list(self.items):
                self.remove_items(item)
            self._touch(now)

        self.raise_(CartCleared(cart_id=str(self.id), items_removed=removed))

    def _touch(self, now):
        self.total_amount = _money(sum(item.quantity * item.unit_price for item in self.items))
        self.revision = (self.revision or 0) + 1
        self.updated_at = now
