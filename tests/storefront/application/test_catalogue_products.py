"""Tests for the local catalogue records and the default catalogue adapter."""

import pytest
from protean import current_domain
from protean.exceptions import ValidationError

from storefront.cart.store import CartStore
from storefront.catalogue import get_catalogue
from storefront.catalogue.local_adapter import LocalCatalogue
from storefront.catalogue.product import CatalogueProduct, PublishCatalogueProduct
from storefront.exceptions import ProductUnavailable


def _publish(product_id="prod-A", name="Product A", price=100.0, status="active"):
    command = PublishCatalogueProduct(product_id=product_id, name=name, price=price, status=status)
    current_domain.process(command, asynchronous=False)


class TestPublishProduct:
    def test_publish_creates_record(self):
        _publish()
        product = current_domain.repository_for(CatalogueProduct).get("prod-A")
        assert product.name == "Product A"
        assert product.price == 100.0
        assert product.status == "active"

    def test_publish_again_updates_record(self):
        _publish()
        _publish(price=80.0, status="inactive")
        product = current_domain.repository_for(CatalogueProduct).get("prod-A")
        assert product.price == 80.0
        assert product.status == "inactive"

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            _publish(status="sold")


class TestLocalCatalogue:
    def test_default_catalogue_reads_local_records(self):
        assert isinstance(get_catalogue(), LocalCatalogue)

    def test_lookup(self):
        _publish()
        snapshot = LocalCatalogue().lookup_product("prod-A")
        assert snapshot.price == 100.0
        assert snapshot.is_orderable

    def test_lookup_missing(self):
        assert LocalCatalogue().lookup_product("prod-missing") is None

    def test_cart_uses_published_prices(self):
        _publish(price=75.0)
        cart = CartStore().add_item("u1", "prod-A", 2)
        assert cart.total_amount == 150.0

    def test_inactive_product_cannot_be_added(self):
        _publish(status="inactive")
        with pytest.raises(ProductUnavailable):
            CartStore().add_item("u1", "prod-A", 1)
