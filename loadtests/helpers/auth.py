"""Bearer tokens for simulated users.

Tokens are minted with the same secret the server verifies with, taken from
STOREFRONT_AUTH_SECRET.
"""

from storefront.identity.credentials import ADMIN_ROLE, issue_token


def bearer(user_id: str, admin: bool = False) -> dict:
    roles = [ADMIN_ROLE] if admin else []
    return {"Authorization": f"Bearer {issue_token(user_id, roles=roles)}"}
