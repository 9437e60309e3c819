"""Admin API key authentication."""

import hmac
import os
from typing import Any

import structlog

from formrelay.utils.exceptions import UnauthorizedError

logger = structlog.get_logger()


def get_bearer_token(event: dict[str, Any]) -> str | None:
    """Extract the bearer token from an API Gateway event.

    Header names are matched case-insensitively.
    """
    headers = event.get("headers") or {}
    for name, value in headers.items():
        if name.lower() == "authorization" and isinstance(value, str):
            scheme, _, token = value.partition(" ")
            if scheme.lower() == "bearer" and token:
                return token.strip()
    return None


def require_admin_key(event: dict[str, Any]) -> None:
    """Ensure the request carries the admin API key.

    Raises:
        UnauthorizedError: If ADMIN_API_KEY is unset or the token doesn't match.
    """
    admin_key = os.environ.get("ADMIN_API_KEY")
    token = get_bearer_token(event)

    if not admin_key or not token or not hmac.compare_digest(token, admin_key):
        logger.warning(
            "Admin access denied",
            admin_key_configured=bool(admin_key),
            token_present=bool(token),
        )
        raise UnauthorizedError("Invalid or missing authorization")
