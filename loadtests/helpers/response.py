"""Response error extraction for load test observability.

Parses storefront API error responses into human-readable messages.
Handles three response shapes:

- Validation (400): {"error": "validation_failed", "fields": {"field": ["msg"]}}
- Domain errors (404/409): {"error": "not_found", "detail": {"field": ["msg"]}}
- Auth errors (401/403): {"detail": "msg"}
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from requests import Response


def _flatten(messages: dict) -> str:
    parts = []
    for key, value in messages.items():
        text = "; ".join(str(v) for v in value) if isinstance(value, list) else str(value)
        parts.append(f"{key}: {text}")
    return " | ".join(parts)


def extract_error_detail(response: Response) -> str:
    """Extract a human-readable error message from an API error response.

    Returns a compact string suitable for Locust failure messages and log lines.
    """
    try:
        body = response.json()
    except ValueError:
        # Not JSON: return raw text, truncated
        text = getattr(response, "text", "") or ""
        return text[:300] or "(empty response body)"

    if not isinstance(body, dict):
        return str(body)[:300]

    if isinstance(body.get("fields"), dict):
        return _flatten(body["fields"])

    detail = body.get("detail")
    if isinstance(detail, dict):
        prefix = f"{body['error']}: " if "error" in body else ""
        return prefix + _flatten(detail)
    if detail is not None:
        return str(detail)

    # Unknown shape: stringify and truncate
    return str(body)[:300]
