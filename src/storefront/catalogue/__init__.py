"""Catalogue lookup factory.

Provides get_catalogue() / set_catalogue() to swap implementations:
- LocalCatalogue (default) reads the local CatalogueProduct records
- any ProductCatalogue implementation can be installed for tests
"""

from storefront.catalogue.local_adapter import LocalCatalogue
from storefront.catalogue.port import ProductCatalogue

_current_catalogue: ProductCatalogue | None = None


def get_catalogue() -> ProductCatalogue:
    """Return the current catalogue. Defaults to LocalCatalogue."""
    global _current_catalogue
    if _current_catalogue is None:
        _current_catalogue = LocalCatalogue()
    return _current_catalogue


def set_catalogue(catalogue: ProductCatalogue) -> None:
    """Override the active catalogue (useful for tests)."""
    global _current_catalogue
    _current_catalogue = catalogue


def reset_catalogue() -> None:
    """Reset to default catalogue."""
    global _current_catalogue
    _current_catalogue = None
