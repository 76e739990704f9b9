"""Catalogue adapter backed by the local CatalogueProduct records."""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.port import ProductCatalogue, ProductSnapshot
from storefront.catalogue.product import CatalogueProduct


class LocalCatalogue(ProductCatalogue):
    """Looks products up in the local CatalogueProduct records."""

    def lookup_product(self, product_id: str) -> ProductSnapshot | None:
        try:
            record = current_domain.repository_for(CatalogueProduct).get(product_id)
        except ObjectNotFoundError:
            return None

        return ProductSnapshot(
            product_id=str(record.product_id),
            name=record.name,
            price=record.price,
            status=record.status,
            image=record.image,
        )
