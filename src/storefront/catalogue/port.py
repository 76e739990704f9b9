"""Catalogue lookup port (abstract interface).

The product catalogue is an external collaborator. The cart only needs to
know, for one product id, its current price and whether it can be ordered.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

ORDERABLE_STATUS = "active"


@dataclass(frozen=True)
class ProductSnapshot:
    """Price and availability of a product at lookup time."""

    product_id: str
    name: str
    price: float
    status: str
    image: str | None = None

    @property
    def is_orderable(self) -> bool:
        return self.status == ORDERABLE_STATUS


class ProductCatalogue(ABC):
    """Abstract catalogue interface."""

    @abstractmethod
    def lookup_product(self, product_id: str) -> ProductSnapshot | None:
        """Return the product's current snapshot, or None if the catalogue does not know it."""
        ...
