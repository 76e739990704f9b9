"""Shared BDD fixtures and step definitions for the storefront."""

import pytest
from protean import current_domain
from pytest_bdd import given, parsers, then

from storefront.cart.store import CartStore
from storefront.catalogue.product import PublishCatalogueProduct
from storefront.checkout.orchestrator import CheckoutOrchestrator
from storefront.order.order import Order
from storefront.payment.ledger import PaymentLedger


@pytest.fixture()
def carts():
    return CartStore()


@pytest.fixture()
def ledger():
    return PaymentLedger()


@pytest.fixture()
def orchestrator(carts, ledger):
    return CheckoutOrchestrator(carts=carts, ledger=ledger)


@pytest.fixture()
def context():
    """What the scenario has produced so far: payment, order and any captured error."""
    return {"payment": None, "order_data": None, "order_id": None, "error": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.parse('the catalogue lists "{product_id}" at {price:f}'))
def _(product_id, price):
    current_domain.process(
        PublishCatalogueProduct(
            product_id=product_id,
            name=f"Product {product_id}",
            price=price,
            status="active",
        ),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.parse('the order status is "{status}"'))
def _(context, status):
    order = current_domain.repository_for(Order).get(context["order_id"])
    assert order.status == status


@then(parsers.parse('the request is rejected for "{field}"'))
def _(context, field):
    assert context["error"] is not None
    assert field in context["error"].messages
