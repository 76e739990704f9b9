"""CartStore — the application-facing entry point for cart reads and writes.

Every mutation for a given user runs while that user's key is held in a
process-wide KeyedLocks registry. Within the lock the command handler loads,
mutates and saves the cart in a single unit of work, so concurrent requests
from the same session (a double-click on "add") apply one after the other
and no increment is lost.

The lock only covers this process. Saves are version checked, and a write
that lost the race to another worker is re-run against the fresh cart up to
MAX_WRITE_ATTEMPTS times before the conflict is raised.
"""

import re

import structlog
from protean.exceptions import ExpectedVersionError, ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.items import AddToCart, ClearCart, RemoveFromCart, UpdateCartItem
from storefront.utils.locks import KeyedLocks

logger = structlog.get_logger(__name__)

PRODUCT_REF_PATTERN = re.compile(r"^[A-Za-z0-9][A-Za-z0-9_.:-]{0,63}$")

MAX_WRITE_ATTEMPTS = 3

cart_locks = KeyedLocks()


def validate_product_ref(value) -> str:
    """Return the product id as a string, or raise a descriptive ValidationError.

    Rejects structured values (dicts, lists) and their stringified forms such
    as ``"[object Object]"`` instead of letting them miscompare against the
    stored ids.
    """
    if isinstance(value, bool) or value is None:
        raise ValidationError({"product_id": ["Product id is required"]})
    if isinstance(value, (dict, list, tuple, set)):
        raise ValidationError(
            {"product_id": [f"Product id must be a single identifier, got a {type(value).__name__}"]}
        )
    if isinstance(value, int):
        value = str(value)
    if not isinstance(value, str):
        raise ValidationError({"product_id": [f"Product id must be a string, got {type(value).__name__}"]})

    value = value.strip()
    if not PRODUCT_REF_PATTERN.match(value):
        raise ValidationError(
            {"product_id": [f"Malformed product id {value!r}: expected a single identifier, not a serialized object"]}
        )
    return value


def validate_quantity(value, minimum: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValidationError({"quantity": ["Quantity must be an integer"]})
    if value < minimum:
        message = "Quantity must be a positive integer" if minimum > 0 else "Quantity cannot be negative"
        raise ValidationError({"quantity": [message]})
    return value


class CartStore:
    """Per-user cart operations."""

    def __init__(self, locks: KeyedLocks | None = None) -> None:
        self.locks = locks or cart_locks

    def get_cart(self, user_id) -> ShoppingCart:
        """Return the user's cart, or an unsaved empty cart if none exists yet."""
        try:
            return current_domain.repository_for(ShoppingCart).get(str(user_id))
        except ObjectNotFoundError:
            return ShoppingCart.create(str(user_id))

    def item_count(self, user_id) -> int:
        return self.get_cart(user_id).item_count

    def add_item(self, user_id, product_id, quantity) -> ShoppingCart:
        product_id = validate_product_ref(product_id)
        quantity = validate_quantity(quantity, minimum=1)
        return self._mutate(
            user_id, AddToCart(customer_id=str(user_id), product_id=product_id, quantity=quantity)
        )

    def update_item(self, user_id, product_id, quantity) -> ShoppingCart:
        product_id = validate_product_ref(product_id)
        quantity = validate_quantity(quantity, minimum=0)
        return self._mutate(
            user_id, UpdateCartItem(customer_id=str(user_id), product_id=product_id, quantity=quantity)
        )

    def remove_item(self, user_id, product_id) -> ShoppingCart:
        product_id = validate_product_ref(product_id)
        return self._mutate(user_id, RemoveFromCart(customer_id=str(user_id), product_id=product_id))

    def clear(self, user_id) -> ShoppingCart:
        return self._mutate(user_id, ClearCart(customer_id=str(user_id)))

    def _mutate(self, user_id, command) -> ShoppingCart:
        with self.locks.hold(f"cart:{user_id}"):
            for attempt in range(1, MAX_WRITE_ATTEMPTS + 1):
                try:
                    current_domain.process(command, asynchronous=False)
                    break
                except ExpectedVersionError:
                    if attempt == MAX_WRITE_ATTEMPTS:
                        raise
                    logger.warning(
                        "Stale cart write, retrying", customer_id=str(user_id), attempt=attempt
                    )
            return self.get_cart(user_id)
