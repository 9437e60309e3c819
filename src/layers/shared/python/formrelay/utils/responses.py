"""API response helper functions."""

import json
import os
from datetime import datetime
from typing import Any

from pydantic import BaseModel as PydanticBaseModel


def get_cors_headers() -> dict:
    """Get CORS headers with the configured origin."""
    return {
        "Access-Control-Allow-Origin": os.environ.get("CORS_ALLOWED_ORIGIN", "*"),
        "Access-Control-Allow-Headers": "Content-Type,Authorization",
        "Access-Control-Allow-Methods": "GET,POST,PATCH,OPTIONS",
        "Content-Type": "application/json",
    }


def _json_serializer(obj: Any) -> Any:
    """JSON serializer for objects not serializable by default."""
    if isinstance(obj, datetime):
        return obj.isoformat()
    if isinstance(obj, PydanticBaseModel):
        return obj.model_dump(mode="json")
    if hasattr(obj, "to_dict"):
        return obj.to_dict()
    raise TypeError(f"Object of type {type(obj)} is not JSON serializable")


def _serialize(data: Any) -> str:
    """Serialize data to JSON string."""
    return json.dumps(data, default=_json_serializer)


def success(data: Any, status_code: int = 200) -> dict:
    """Create a successful API response.

    Args:
        data: Response data (dict, list, or Pydantic model).
        status_code: HTTP status code (default 200).

    Returns:
        API Gateway response dict.
    """
    if isinstance(data, PydanticBaseModel):
        body = data.model_dump(mode="json")
    else:
        body = data

    return {
        "statusCode": status_code,
        "headers": get_cors_headers(),
        "body": _serialize(body),
    }


def created(data: Any) -> dict:
    """Create a 201 Created response."""
    return success(data, status_code=201)


def degraded(data: dict, message: str, error_code: str) -> dict:
    """Create a 202 response for a write that succeeded with a failed side effect.

    The record exists, so the body carries its identifiers along with the
    error code. Total failures use ``error`` instead and carry no data.
    """
    body = {**data, "message": message, "error_code": error_code}
    return success(body, status_code=202)


def error(
    message: str,
    status_code: int = 500,
    error_code: str | None = None,
    details: dict | None = None,
) -> dict:
    """Create an error API response.

    Args:
        message: Error message.
        status_code: HTTP status code.
        error_code: Machine-readable error code.
        details: Additional error details.

    Returns:
        API Gateway response dict.
    """
    body: dict[str, Any] = {
        "error": True,
        "message": message,
    }

    if error_code:
        body["error_code"] = error_code
    if details:
        body["details"] = details

    return {
        "statusCode": status_code,
        "headers": get_cors_headers(),
        "body": _serialize(body),
    }


def validation_error(errors: list[dict]) -> dict:
    """Create a validation error response.

    Args:
        errors: List of validation errors with field and message.
    """
    return error(
        message="Validation failed",
        status_code=400,
        error_code="VALIDATION_ERROR",
        details={"errors": errors},
    )


def not_found(resource_type: str, resource_id: str) -> dict:
    """Create a 404 Not Found response."""
    return error(
        message=f"{resource_type} with ID '{resource_id}' not found",
        status_code=404,
        error_code="NOT_FOUND",
        details={"resource_type": resource_type, "resource_id": resource_id},
    )


def unauthorized(message: str = "Authentication required") -> dict:
    """Create a 401 Unauthorized response."""
    return error(
        message=message,
        status_code=401,
        error_code="UNAUTHORIZED",
    )


def service_unavailable(detail: str | None = None) -> dict:
    """Create a 503 response for a failing backing store.

    ``detail`` is only echoed when SHOW_DETAILED_ERRORS is enabled.
    """
    return error(
        message="We could not process your request right now. Please try again.",
        status_code=503,
        error_code="SERVICE_UNAVAILABLE",
        details={"detail": detail} if detail and show_detailed_errors() else None,
    )


def internal_error(message: str, detail: str | None = None) -> dict:
    """Create a 500 response. ``detail`` is only echoed when SHOW_DETAILED_ERRORS is enabled."""
    return error(
        message=message,
        status_code=500,
        error_code="INTERNAL_ERROR",
        details={"detail": detail} if detail and show_detailed_errors() else None,
    )


def show_detailed_errors() -> bool:
    """Whether error responses may include raw error messages."""
    return os.environ.get("SHOW_DETAILED_ERRORS", "false").lower() == "true"


def parse_json_body(event: dict) -> dict:
    """Parse the JSON body of an API Gateway event.

    Raises:
        ValueError: If the body is not a JSON object.
    """
    raw = event.get("body") or "{}"
    try:
        body = json.loads(raw)
    except json.JSONDecodeError as e:
        raise ValueError("Request body must be valid JSON") from e
    if not isinstance(body, dict):
        raise ValueError("Request body must be a JSON object")
    return body
