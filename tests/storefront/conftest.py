import pytest
from protean.integrations.pytest import DomainFixture

from storefront.catalogue.port import ProductCatalogue, ProductSnapshot


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield
        _reset_infrastructure()


def _reset_infrastructure():
    """Clear databases, event store and swapped adapters after every test."""
    from protean import current_domain

    from storefront.catalogue import reset_catalogue
    from storefront.gateway import reset_gateway

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()

    reset_gateway()
    reset_catalogue()


class StubCatalogue(ProductCatalogue):
    """In-memory catalogue with products registered per test."""

    def __init__(self) -> None:
        self.products: dict[str, ProductSnapshot] = {}

    def add(self, product_id, price, name=None, status="active"):
        self.products[product_id] = ProductSnapshot(
            product_id=product_id,
            name=name or f"Product {product_id}",
            price=price,
            status=status,
        )

    def lookup_product(self, product_id):
        return self.products.get(product_id)


@pytest.fixture()
def catalogue():
    from storefront.catalogue import set_catalogue

    stub = StubCatalogue()
    stub.add("prod-A", 100.0, name="Product A")
    stub.add("prod-B", 49.5, name="Product B")
    stub.add("prod-C", 10.0, name="Product C")
    stub.add("prod-retired", 20.0, status="discontinued")
    set_catalogue(stub)
    return stub


@pytest.fixture()
def gateway():
    from storefront.gateway import set_gateway
    from storefront.gateway.fake_adapter import FakeGateway

    fake = FakeGateway()
    set_gateway(fake)
    return fake


@pytest.fixture()
def order_data():
    """A valid checkout payload worth 500."""
    return {
        "items": [{"product_id": "prod-A", "name": "Product A", "price": 100.0, "quantity": 5}],
        "customer": {"name": "Asha Rao", "email": "asha@example.com", "phone": "+91-9000000000"},
        "address": {
            "line1": "12 MG Road",
            "city": "Bengaluru",
            "state": "KA",
            "postal_code": "560001",
            "country": "IN",
        },
    }
