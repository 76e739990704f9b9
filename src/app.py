"""Storefront FastAPI application.

Web server for the checkout core: carts, payments, checkout, orders and the
catalogue price feed. Commands are processed synchronously per request.

Usage:
    STOREFRONT_AUTH_SECRET=... uvicorn --factory app:create_app --app-dir src --host 0.0.0.0 --port 8000
"""

import uuid

import structlog
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api import cart_router, catalogue_router, checkout_router, order_router, payment_router
from storefront.api.errors import register_error_handlers
from storefront.domain import storefront
from storefront.identity.credentials import TokenVerifier
from storefront.utils.logging import add_context, clear_context, configure_logging

logger = structlog.get_logger(__name__)


def create_app(verifier: TokenVerifier | None = None, log_dir: str = "logs", init_domain: bool = True) -> FastAPI:
    """Build the application.

    Without an explicit verifier the token secret is read from the
    environment; a missing secret aborts startup with MissingAuthSecret.
    Tests that already activated the domain pass ``init_domain=False``.
    """
    verifier = verifier or TokenVerifier.from_env()

    configure_logging(log_dir)
    if init_domain:
        storefront.init()

    app = FastAPI(
        title="Storefront API",
        description="Storefront checkout core: carts, payments and orders",
    )
    app.state.token_verifier = verifier

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the storefront domain context and bind a request id for logging."""
        request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        add_context(request_id=request_id, path=request.url.path)
        try:
            with storefront.domain_context():
                response = await call_next(request)
        finally:
            clear_context()
        response.headers["X-Request-ID"] = request_id
        return response

    register_error_handlers(app)

    app.include_router(cart_router)
    app.include_router(payment_router)
    app.include_router(checkout_router)
    app.include_router(order_router)
    app.include_router(catalogue_router)

    @app.get("/health")
    async def health():
        return JSONResponse(content={"status": "ok", "domain": storefront.name})

    logger.info("Storefront application created")
    return app

