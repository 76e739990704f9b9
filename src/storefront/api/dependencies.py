"""FastAPI dependencies: bearer authentication and admin gating."""

import structlog
from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from storefront.identity.credentials import InvalidCredential, Principal
from storefront.utils.logging import add_context

logger = structlog.get_logger(__name__)

bearer_scheme = HTTPBearer(auto_error=False)


def current_user(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> Principal:
    """Resolve the caller from the Authorization header or reject with 401."""
    if credentials is None or not credentials.credentials:
        raise HTTPException(status_code=401, detail="Authentication required", headers={"WWW-Authenticate": "Bearer"})

    verifier = request.app.state.token_verifier
    try:
        principal = verifier.verify(credentials.credentials)
    except InvalidCredential as exc:
        logger.info("Rejected bearer token", reason=str(exc))
        raise HTTPException(
            status_code=401, detail="Invalid or expired token", headers={"WWW-Authenticate": "Bearer"}
        ) from exc

    add_context(user_id=principal.user_id)
    return principal


def require_admin(principal: Principal = Depends(current_user)) -> Principal:
    if not principal.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return principal
