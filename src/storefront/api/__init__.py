"""Storefront HTTP API package."""

from storefront.api.routes import cart_router, catalogue_router, checkout_router, order_router, payment_router

__all__ = ["cart_router", "catalogue_router", "checkout_router", "order_router", "payment_router"]
