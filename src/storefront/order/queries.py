"""Order read side: a customer's own orders, a single order, and the admin listing."""

from math import ceil

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.order.order import Order, OrderStatus

# Upper bound of orders scanned per listing request
MAX_SCAN = 1000


def _newest_first(orders):
    return sorted(orders, key=lambda o: o.created_at_iso or "", reverse=True)


def _scan(**filters):
    query = current_domain.repository_for(Order)._dao.query.limit(MAX_SCAN)
    if filters:
        query = query.filter(**filters)
    return query.all().items


def orders_for_customer(customer_id) -> list[Order]:
    return _newest_first(_scan(customer_id=str(customer_id)))


def order_for_payment(payment_id) -> Order | None:
    matches = _scan(payment_id=str(payment_id))
    return matches[0] if matches else None


def get_order(order_id, customer_id=None, is_admin=False) -> Order:
    """Return one order. Non-admin callers only see their own orders."""
    order = current_domain.repository_for(Order).get(str(order_id))
    if not is_admin and str(order.customer_id) != str(customer_id):
        raise ObjectNotFoundError({"order": [f"Order {order_id} does not exist"]})
    return order


def _matches_search(order, term) -> bool:
    haystack = [order.order_number or ""]
    if order.customer:
        haystack.extend([order.customer.name or "", order.customer.email or ""])
    return any(term in value.lower() for value in haystack)


def list_orders(status=None, search=None, page=1, limit=20) -> dict:
    """Admin listing with optional status filter, search and pagination."""
    page = max(int(page or 1), 1)
    limit = max(int(limit or 20), 1)

    filters = {}
    if status and status != "all":
        try:
            filters["status"] = OrderStatus(status).value
        except ValueError as exc:
            raise ValidationError({"status": [f"Unknown status {status!r}"]}) from exc

    orders = _newest_first(_scan(**filters))
    if search and search.strip():
        term = search.strip().lower()
        orders = [order for order in orders if _matches_search(order, term)]

    total = len(orders)
    start = (page - 1) * limit
    return {
        "data": orders[start : start + limit],
        "pagination": {
            "total": total,
            "page": page,
            "limit": limit,
            "pages": ceil(total / limit) if total else 0,
        },
    }
