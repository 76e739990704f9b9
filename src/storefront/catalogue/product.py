"""Catalogue products as the storefront sees them: price and availability only.

The external catalogue publishes price and status changes through the admin
upsert endpoint. Carts read these records when a product is added.
"""

from enum import Enum

from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import logger, storefront


class ProductAvailability(Enum):
    ACTIVE = "active"
    INACTIVE = "inactive"
    DRAFT = "draft"
    DISCONTINUED = "discontinued"


@storefront.aggregate
class CatalogueProduct:
    product_id = Identifier(identifier=True, required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    status = String(required=True, choices=ProductAvailability, default=ProductAvailability.ACTIVE.value)
    image = String(max_length=1000)


@storefront.command(part_of="CatalogueProduct")
class PublishCatalogueProduct:
    """Upsert the storefront's view of one catalogue product."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    price = Float(required=True, min_value=0.0)
    status = String(required=True, choices=ProductAvailability)
    image = String(max_length=1000)


@storefront.command_handler(part_of=CatalogueProduct)
class CatalogueProductHandler:
    @handle(PublishCatalogueProduct)
    def publish_product(self, command):
        repo = current_domain.repository_for(CatalogueProduct)
        try:
            product = repo.get(command.product_id)
            product.name = command.name
            product.price = command.price
            product.status = command.status
            product.image = command.image
        except ObjectNotFoundError:
            product = CatalogueProduct(
                product_id=command.product_id,
                name=command.name,
                price=command.price,
                status=command.status,
                image=command.image,
            )
        repo.add(product)
        logger.info(
            "Catalogue product published",
            product_id=str(command.product_id),
            price=command.price,
            status=command.status,
        )
        return str(product.product_id)
