"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Float, Identifier, Integer

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartItemAdded:
    """A product was added to the cart, or its quantity increased by a repeat add."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity_added = Integer(required=True)
    line_quantity = Integer(required=True)
    unit_price = Float(required=True)
    total_amount = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemQuantityChanged:
    """The quantity of a cart line was replaced."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    total_amount = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    total_amount = Float(required=True)


@storefront.event(part_of="ShoppingCart")
class CartCleared:
    """All lines were removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    items_removed = Integer(required=True)
