"""Maps domain exceptions onto HTTP responses.

Validation problems are client errors (400) with field-level messages, missing
or foreign records are 404, and illegal state changes, concurrent write
conflicts and exhausted order number retries are 409.
"""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ExpectedVersionError, InvalidOperationError, ObjectNotFoundError, ValidationError
from protean.integrations.fastapi import register_exception_handlers

from storefront.exceptions import OrderNumberConflict, ProductUnavailable

logger = structlog.get_logger(__name__)


def _messages(exc) -> dict:
    messages = getattr(exc, "messages", None)
    if isinstance(messages, dict):
        return messages
    return {"_error": [str(messages or exc)]}


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    fields: dict[str, list[str]] = {}
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body") or "body"
        fields.setdefault(location, []).append(error.get("msg", "Invalid value"))
    return JSONResponse(status_code=400, content={"error": "validation_failed", "fields": fields})


async def validation_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": "validation_failed", "fields": _messages(exc)})


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    error = "product_unavailable" if isinstance(exc, ProductUnavailable) else "not_found"
    return JSONResponse(status_code=404, content={"error": error, "detail": _messages(exc)})


async def invalid_operation_handler(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return JSONResponse(status_code=409, content={"error": "conflict", "detail": _messages(exc)})


async def version_conflict_handler(request: Request, exc: ExpectedVersionError) -> JSONResponse:
    logger.warning("Concurrent write conflict", path=request.url.path)
    return JSONResponse(
        status_code=409, content={"error": "conflict", "detail": {"_error": ["Concurrent update, please retry"]}}
    )


async def order_number_conflict_handler(request: Request, exc: OrderNumberConflict) -> JSONResponse:
    logger.error("Order number conflict", attempts=exc.attempts, path=request.url.path)
    return JSONResponse(status_code=409, content={"error": "conflict", "detail": {"order_number": [str(exc)]}})


def register_error_handlers(app: FastAPI) -> None:
    """Install Protean's defaults, then the storefront mapping on top."""
    register_exception_handlers(app)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(ValidationError, validation_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(InvalidOperationError, invalid_operation_handler)
    app.add_exception_handler(ExpectedVersionError, version_conflict_handler)
    app.add_exception_handler(OrderNumberConflict, order_number_conflict_handler)
