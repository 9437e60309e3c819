"""Outbound email message model."""

from pydantic import BaseModel as PydanticBaseModel, Field


class EmailMessage(PydanticBaseModel):
    """A rendered email ready for the gateway."""

    sender: str
    recipients: list[str] = Field(..., min_length=1)
    subject: str
    body_text: str
    body_html: str | None = None
    reply_to: list[str] | None = None
