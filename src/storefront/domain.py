"""Storefront bounded context — Shopping Cart, Payments and Orders.

Handles per-user cart mutation (CQRS), the payment lifecycle
(initiation → verification → completion) and order materialization from a
completed payment. A single domain is used so that a payment and the order
it produces are persisted in the same unit of work.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
