"""Bearer-token verification for the identity collaborator.

Tokens are HMAC-signed JWTs. The user id comes from the ``sub`` claim (or
``userId`` / ``id`` for tokens minted by older clients); an optional
``roles`` list grants admin access. The signing secret has no default:
without ``STOREFRONT_AUTH_SECRET`` the service refuses to start.
"""

import os
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

import jwt

AUTH_SECRET_ENV = "STOREFRONT_AUTH_SECRET"
AUTH_ALGORITHM_ENV = "STOREFRONT_AUTH_ALGORITHM"
DEFAULT_ALGORITHM = "HS256"
ADMIN_ROLE = "admin"

_USER_ID_CLAIMS = ("sub", "userId", "id")


class MissingAuthSecret(RuntimeError):
    def __init__(self) -> None:
        super().__init__(f"{AUTH_SECRET_ENV} must be set; refusing to start without a token signing secret")


class InvalidCredential(Exception):
    """The presented bearer token is missing, malformed, expired or forged."""


@dataclass(frozen=True)
class Principal:
    user_id: str
    roles: frozenset[str] = field(default_factory=frozenset)

    @property
    def is_admin(self) -> bool:
        return ADMIN_ROLE in self.roles


class TokenVerifier:
    def __init__(self, secret: str, algorithm: str = DEFAULT_ALGORITHM) -> None:
        if not secret:
            raise MissingAuthSecret()
        self.secret = secret
        self.algorithm = algorithm

    @classmethod
    def from_env(cls) -> "TokenVerifier":
        secret = os.environ.get(AUTH_SECRET_ENV)
        if not secret:
            raise MissingAuthSecret()
        return cls(secret, os.environ.get(AUTH_ALGORITHM_ENV, DEFAULT_ALGORITHM))

    def verify(self, token: str) -> Principal:
        try:
            claims = jwt.decode(token, self.secret, algorithms=[self.algorithm])
        except jwt.PyJWTError as exc:
            raise InvalidCredential(str(exc)) from exc

        user_id = next((claims[name] for name in _USER_ID_CLAIMS if claims.get(name)), None)
        if user_id is None:
            raise InvalidCredential("Token carries no user id")

        roles = claims.get("roles") or []
        if isinstance(roles, str):
            roles = [roles]
        return Principal(user_id=str(user_id), roles=frozenset(roles))

    def issue(self, user_id: str, roles=(), expires_in: timedelta = timedelta(hours=1)) -> str:
        """Mint a token for tooling and tests."""
        now = datetime.now(UTC)
        claims = {"sub": str(user_id), "roles": list(roles), "iat": now, "exp": now + expires_in}
        return jwt.encode(claims, self.secret, algorithm=self.algorithm)


def issue_token(user_id: str, roles=(), secret: str | None = None, expires_in: timedelta = timedelta(hours=1)) -> str:
    """Mint a token with the configured (or given) secret."""
    verifier = TokenVerifier(secret) if secret else TokenVerifier.from_env()
    return verifier.issue(user_id, roles=roles, expires_in=expires_in)
