"""Repository classes for DynamoDB data access."""

from formrelay.repositories.base import BaseRepository
from formrelay.repositories.contact_submission import ContactSubmissionRepository
from formrelay.repositories.waitlist_submission import WaitlistSubmissionRepository

__all__ = [
    "BaseRepository",
    "ContactSubmissionRepository",
    "WaitlistSubmissionRepository",
]
