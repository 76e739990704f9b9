"""Per-user state tracking for Locust load test scenarios.

Each Locust user instance maintains its own state. State tracks ids returned
by earlier steps so follow-up requests can reference them.
"""

from dataclasses import dataclass, field


@dataclass
class CartState:
    """Tracks a cart as seen through the API."""

    product_ids: list[str] = field(default_factory=list)
    revision: int = 0


@dataclass
class CheckoutState:
    """Tracks one checkout from the first cart line to the paid order."""

    product_ids: list[str] = field(default_factory=list)
    payment_id: str | None = None
    order_data: dict | None = None
    order_id: str | None = None
    current_status: str = "pending"
