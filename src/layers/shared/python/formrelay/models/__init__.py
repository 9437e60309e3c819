"""Pydantic models for FormRelay entities."""

from formrelay.models.base import BaseModel, Submission
from formrelay.models.email import EmailMessage
from formrelay.models.submission import (
    ContactRequest,
    ContactStatus,
    ContactSubmission,
    UpdateStatusRequest,
    WaitlistRequest,
    WaitlistStatus,
    WaitlistSubmission,
)

__all__ = [
    "BaseModel",
    "Submission",
    "EmailMessage",
    "ContactRequest",
    "ContactStatus",
    "ContactSubmission",
    "UpdateStatusRequest",
    "WaitlistRequest",
    "WaitlistStatus",
    "WaitlistSubmission",
]
