"""BDD tests for order status progression."""

from protean import current_domain
from protean.exceptions import InvalidOperationError
from pytest_bdd import given, parsers, scenarios, then, when

from storefront.order.management import UpdateOrderStatus

scenarios("features/order_status.feature")


@given(parsers.parse('a paid order for customer "{user_id}"'))
def _(ledger, context, order_data, user_id):
    payment = ledger.initiate(user_id, amount=500)
    payment = ledger.verify(user_id, payment.id, "completed", order_data=order_data)
    context["order_id"] = payment.order_id


@given(parsers.parse('the order has been moved to "{status}"'))
def _(context, status):
    current_domain.process(UpdateOrderStatus(order_id=context["order_id"], status=status), asynchronous=False)


@when(parsers.parse('the order is moved to "{status}"'))
def _(context, status):
    try:
        current_domain.process(
            UpdateOrderStatus(order_id=context["order_id"], status=status),
            asynchronous=False,
        )
    except InvalidOperationError as exc:
        context["error"] = exc


@then("the status change is rejected")
def _(context):
    assert isinstance(context["error"], InvalidOperationError)
