"""Storefront-specific exceptions.

Validation, not-found and invalid-operation failures use Protean's own
exception types; only the cases Protean has no name for live here.
"""

from protean.exceptions import ObjectNotFoundError


class ProductUnavailable(ObjectNotFoundError):
    """The product exists in no orderable form (unknown, inactive or discontinued)."""


class OrderNumberConflict(Exception):
    """No unique order number could be assigned within the allowed attempts."""

    def __init__(self, attempts: int) -> None:
        self.attempts = attempts
        super().__init__(f"Could not assign a unique order number after {attempts} attempts")
