"""Contact and waitlist submission models."""

from enum import Enum
from typing import ClassVar

from pydantic import BaseModel as PydanticBaseModel, ConfigDict, EmailStr, Field, field_validator

from formrelay.models.base import Submission


class ContactStatus(str, Enum):
    """Contact submission lifecycle."""

    NEW = "new"
    READ = "read"
    REPLIED = "replied"


class WaitlistStatus(str, Enum):
    """Waitlist submission lifecycle."""

    ACTIVE = "active"
    NOTIFIED = "notified"
    CONVERTED = "converted"


class ContactSubmission(Submission):
    """Contact form submission.

    Key Pattern:
        PK: CONTACT#{email}
        SK: SUBMISSION#{id}
        GSI1PK: CONTACT_SUBMISSIONS
        GSI1SK: {submitted_at}#{id}
    """

    _id_prefix: ClassVar[str] = "contact"

    name: str = Field(..., max_length=100)
    message: str = Field(..., max_length=2000)
    status: ContactStatus = ContactStatus.NEW

    def get_pk(self) -> str:
        """Get partition key: CONTACT#{email}."""
        return f"CONTACT#{self.email}"

    def get_sk(self) -> str:
        """Get sort key: SUBMISSION#{id}."""
        return f"SUBMISSION#{self.id}"

    def get_gsi1_keys(self) -> dict[str, str]:
        """Get GSI1 keys for listing newest first."""
        return {
            "GSI1PK": "CONTACT_SUBMISSIONS",
            "GSI1SK": f"{self.submitted_at.isoformat()}#{self.id}",
        }


class WaitlistSubmission(Submission):
    """Waitlist signup.

    ``position`` is assigned once at creation from the number of active
    signups. Concurrent signups may share a position.

    Key Pattern:
        PK: WAITLIST#{email}
        SK: SUBMISSION#{id}
        GSI1PK: WAITLIST_SUBMISSIONS
        GSI1SK: {position:010d}#{id}
    """

    _id_prefix: ClassVar[str] = "waitlist"

    name: str | None = Field(None, max_length=100)
    position: int = Field(..., ge=1)
    status: WaitlistStatus = WaitlistStatus.ACTIVE

    def get_pk(self) -> str:
        """Get partition key: WAITLIST#{email}."""
        return f"WAITLIST#{self.email}"

    def get_sk(self) -> str:
        """Get sort key: SUBMISSION#{id}."""
        return f"SUBMISSION#{self.id}"

    def get_gsi1_keys(self) -> dict[str, str]:
        """Get GSI1 keys for listing by position."""
        return {
            "GSI1PK": "WAITLIST_SUBMISSIONS",
            "GSI1SK": f"{self.position:010d}#{self.id}",
        }


class ContactRequest(PydanticBaseModel):
    """Request model for the contact form."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    message: str = Field(..., min_length=1, max_length=2000)


class WaitlistRequest(PydanticBaseModel):
    """Request model for a waitlist signup."""

    model_config = ConfigDict(str_strip_whitespace=True)

    email: EmailStr
    name: str | None = Field(None, max_length=100)

    @field_validator("name")
    @classmethod
    def empty_name_to_none(cls, v: str | None) -> str | None:
        return v or None


class UpdateStatusRequest(PydanticBaseModel):
    """Admin request to move a submission through its lifecycle."""

    type: str = Field(..., pattern="^(contact|waitlist)$")
    id: str = Field(..., min_length=1)
    email: EmailStr
    status: str = Field(..., min_length=1)
