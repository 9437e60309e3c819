"""Utility functions and helpers."""

from formrelay.utils.responses import created, degraded, error, success, validation_error, not_found
from formrelay.utils.auth import require_admin_key
from formrelay.utils.exceptions import (
    FormRelayError,
    NotFoundError,
    ValidationError,
    UnauthorizedError,
    ConflictError,
    ExternalServiceError,
    StoreError,
    EmailError,
    NotificationError,
)

__all__ = [
    # Response helpers
    "success",
    "created",
    "degraded",
    "error",
    "validation_error",
    "not_found",
    # Auth
    "require_admin_key",
    # Exceptions
    "FormRelayError",
    "NotFoundError",
    "ValidationError",
    "UnauthorizedError",
    "ConflictError",
    "ExternalServiceError",
    "StoreError",
    "EmailError",
    "NotificationError",
]
