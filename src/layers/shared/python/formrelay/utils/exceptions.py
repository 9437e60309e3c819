"""Custom exception classes for FormRelay."""


class FormRelayError(Exception):
    """Base exception for all FormRelay errors."""

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        status_code: int = 500,
        details: dict | None = None,
    ):
        """Initialize FormRelayError.

        Args:
            message: Human-readable error message.
            error_code: Machine-readable error code.
            status_code: HTTP status code for API responses.
            details: Additional error details.
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code or "INTERNAL_ERROR"
        self.status_code = status_code
        self.details = details or {}

    def to_dict(self) -> dict:
        """Convert exception to dictionary for API response."""
        result = {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
        }
        if self.details:
            result["details"] = self.details
        return result


class NotFoundError(FormRelayError):
    """Raised when a requested resource is not found."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        message: str | None = None,
    ):
        """Initialize NotFoundError.

        Args:
            resource_type: Type of resource (e.g., "ContactSubmission").
            resource_id: ID of the resource that was not found.
            message: Optional custom message.
        """
        self.resource_type = resource_type
        self.resource_id = resource_id
        super().__init__(
            message=message or f"{resource_type} with ID '{resource_id}' not found",
            error_code="NOT_FOUND",
            status_code=404,
            details={"resource_type": resource_type, "resource_id": resource_id},
        )


class ValidationError(FormRelayError):
    """Raised when input validation fails."""

    def __init__(
        self,
        message: str = "Validation failed",
        errors: list[dict] | None = None,
    ):
        """Initialize ValidationError.

        Args:
            message: Error message.
            errors: List of validation errors with field and message.
        """
        self.errors = errors or []
        super().__init__(
            message=message,
            error_code="VALIDATION_ERROR",
            status_code=400,
            details={"errors": self.errors},
        )

    @classmethod
    def from_pydantic(cls, exc: Exception) -> "ValidationError":
        """Create ValidationError from Pydantic ValidationError."""
        errors = []
        if hasattr(exc, "errors"):
            for error in exc.errors():
                errors.append(
                    {
                        "field": ".".join(str(loc) for loc in error.get("loc", [])),
                        "message": error.get("msg", "Invalid value"),
                        "type": error.get("type", "unknown"),
                    }
                )
        return cls(message="Validation failed", errors=errors)


class UnauthorizedError(FormRelayError):
    """Raised when authentication fails."""

    def __init__(self, message: str = "Authentication required"):
        """Initialize UnauthorizedError."""
        super().__init__(
            message=message,
            error_code="UNAUTHORIZED",
            status_code=401,
        )


class ConflictError(FormRelayError):
    """Raised when there's a conflict (e.g., duplicate, optimistic lock failure)."""

    def __init__(
        self,
        message: str = "Resource conflict",
        conflict_type: str | None = None,
    ):
        """Initialize ConflictError."""
        super().__init__(
            message=message,
            error_code="CONFLICT",
            status_code=409,
            details={"conflict_type": conflict_type} if conflict_type else None,
        )


class ExternalServiceError(FormRelayError):
    """Raised when an external service call fails.

    ``upstream_status`` is the HTTP status the service answered with, when
    there was one. Retry classification only ever looks at this attribute.
    """

    def __init__(
        self,
        service: str,
        message: str | None = None,
        upstream_status: int | None = None,
        original_error: str | None = None,
        error_code: str = "EXTERNAL_SERVICE_ERROR",
        status_code: int = 502,
    ):
        """Initialize ExternalServiceError."""
        self.service = service
        self.upstream_status = upstream_status
        super().__init__(
            message=message or f"External service '{service}' returned an error",
            error_code=error_code,
            status_code=status_code,
            details={
                "service": service,
                "upstream_status": upstream_status,
                "original_error": original_error,
            },
        )


class StoreError(ExternalServiceError):
    """Raised when the document store is unreachable or rejects a request."""

    def __init__(
        self,
        message: str = "Document store request failed",
        upstream_status: int | None = None,
        original_error: str | None = None,
    ):
        """Initialize StoreError."""
        super().__init__(
            service="dynamodb",
            message=message,
            upstream_status=upstream_status,
            original_error=original_error,
            error_code="STORE_UNAVAILABLE",
            status_code=503,
        )


class EmailError(ExternalServiceError):
    """Raised when the email gateway fails to accept a message."""

    def __init__(
        self,
        message: str,
        code: str | None = None,
        upstream_status: int | None = None,
        original_error: str | None = None,
    ):
        """Initialize EmailError.

        Args:
            message: Error message.
            code: Gateway error code (e.g. ``MessageRejected``).
            upstream_status: HTTP status returned by the gateway.
            original_error: Raw gateway error message.
        """
        self.code = code
        super().__init__(
            service="ses",
            message=message,
            upstream_status=upstream_status,
            original_error=original_error,
            error_code="EMAIL_SEND_FAILED",
        )


class NotificationError(FormRelayError):
    """Raised when a critical notification could not be delivered."""

    def __init__(self, message: str, cause: Exception | None = None):
        """Initialize NotificationError.

        Args:
            message: Error message.
            cause: The last error raised by the email gateway.
        """
        self.cause = cause
        super().__init__(
            message=message,
            error_code="NOTIFICATION_FAILED",
            status_code=502,
            details={"cause": str(cause)} if cause else None,
        )
