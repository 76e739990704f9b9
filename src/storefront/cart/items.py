"""Cart line management — commands and handler.

Each command is one read-modify-write of a single user's cart, executed
inside one unit of work. Callers serialise commands per user (see
CartStore); the handler itself never reads outside that unit of work.
"""

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalogue import get_catalogue
from storefront.domain import logger, storefront
from storefront.exceptions import ProductUnavailable


@storefront.command(part_of="ShoppingCart")
class AddToCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command(part_of="ShoppingCart")
class UpdateCartItem:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=0)


@storefront.command(part_of="ShoppingCart")
class RemoveFromCart:
    customer_id = Identifier(required=True)
    product_id = Identifier(required=True)


@storefront.command(part_of="ShoppingCart")
class ClearCart:
    customer_id = Identifier(required=True)


def _load_cart(repo, customer_id):
    try:
        return repo.get(customer_id)
    except ObjectNotFoundError as exc:
        raise ObjectNotFoundError({"cart": [f"No cart exists for customer {customer_id}"]}) from exc


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = get_catalogue().lookup_product(str(command.product_id))
        if product is None:
            raise ProductUnavailable({"product_id": [f"Product {command.product_id} does not exist"]})
        if not product.is_orderable:
            raise ProductUnavailable({"product_id": [f"Product {command.product_id} is not available"]})

        repo = current_domain.repository_for(ShoppingCart)
        try:
            cart = repo.get(command.customer_id)
        except ObjectNotFoundError:
            cart = ShoppingCart.create(command.customer_id)

        cart.add_item(
            product_id=command.product_id,
            quantity=command.quantity,
            unit_price=product.price,
            name=product.name,
        )
        repo.add(cart)

        logger.info(
            "Item added to cart",
            customer_id=str(command.customer_id),
            product_id=str(command.product_id),
            quantity=command.quantity,
            total_amount=cart.total_amount,
        )

    @handle(UpdateCartItem)
    def update_cart_item(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _load_cart(repo, command.customer_id)
        cart.update_item(product_id=command.product_id, quantity=command.quantity)
        repo.add(cart)

        logger.info(
            "Cart line updated",
            customer_id=str(command.customer_id),
            product_id=str(command.product_id),
            quantity=command.quantity,
            total_amount=cart.total_amount,
        )

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = _load_cart(repo, command.customer_id)
        cart.remove_item(product_id=command.product_id)
        repo.add(cart)

        logger.info(
            "Cart line removed",
            customer_id=str(command.customer_id),
            product_id=str(command.product_id),
            total_amount=cart.total_amount,
        )

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        try:
            cart = repo.get(command.customer_id)
        except ObjectNotFoundError:
            return

        if not cart.items:
            return

        cart.clear()
        repo.add(cart)
        logger.info("Cart cleared", customer_id=str(command.customer_id))
