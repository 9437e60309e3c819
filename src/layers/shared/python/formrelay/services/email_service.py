"""Email integration service using Amazon SES.

Raw botocore failures are wrapped into ``EmailError`` here, tagged with the
HTTP status SES answered with, so retry classification never inspects
botocore exceptions directly.
"""

import asyncio
import os
from typing import Any

import boto3
import structlog
from botocore.exceptions import BotoCoreError, ClientError

from formrelay.models.email import EmailMessage
from formrelay.utils.exceptions import EmailError

logger = structlog.get_logger()

# SES reports throttling as a 400; tag it 429 so it stays retryable
THROTTLING_CODES = frozenset({"Throttling", "ThrottlingException", "TooManyRequestsException"})


def _upstream_status(e: ClientError) -> int | None:
    if e.response.get("Error", {}).get("Code") in THROTTLING_CODES:
        return 429
    return e.response.get("ResponseMetadata", {}).get("HTTPStatusCode")


class EmailService:
    """Service for sending emails via Amazon SES."""

    def __init__(
        self,
        region_name: str | None = None,
        configuration_set: str | None = None,
        from_email: str | None = None,
    ):
        """Initialize Email service.

        Args:
            region_name: AWS region for SES. Falls back to AWS_REGION env var.
            configuration_set: Optional SES configuration set for tracking.
            from_email: Default sender. Falls back to SES_FROM_EMAIL env var.
        """
        self.region_name = region_name or os.environ.get("AWS_REGION", "us-east-1")
        self.configuration_set = configuration_set or os.environ.get("SES_CONFIGURATION_SET")
        self.from_email = from_email or os.environ.get("SES_FROM_EMAIL", "noreply@formrelay.dev")
        self._client = None

    @property
    def client(self):
        """Get SES client (lazy initialization).

        Returns:
            Boto3 SES client.
        """
        if self._client is None:
            self._client = boto3.client("ses", region_name=self.region_name)
        return self._client

    async def send_email(self, message: EmailMessage) -> dict[str, Any]:
        """Send an email.

        Args:
            message: Rendered message.

        Returns:
            Dict with message_id and status.

        Raises:
            EmailError: If SES rejects the message or cannot be reached.
        """
        kwargs: dict[str, Any] = {
            "Source": message.sender,
            "Destination": {"ToAddresses": message.recipients},
            "Message": {
                "Subject": {"Data": message.subject, "Charset": "UTF-8"},
                "Body": self._build_body(message),
            },
        }

        if message.reply_to:
            kwargs["ReplyToAddresses"] = message.reply_to

        if self.configuration_set:
            kwargs["ConfigurationSetName"] = self.configuration_set

        subject = message.subject
        logger.info(
            "Sending email",
            to=message.recipients,
            from_email=message.sender,
            subject=subject[:50] + "..." if len(subject) > 50 else subject,
            has_html=bool(message.body_html),
        )

        try:
            response = await asyncio.to_thread(self.client.send_email, **kwargs)

        except ClientError as e:
            error_code = e.response["Error"]["Code"]
            error_message = e.response["Error"]["Message"]

            logger.error(
                "SES send failed",
                error_code=error_code,
                error_message=error_message,
                to=message.recipients,
            )

            raise EmailError(
                f"Failed to send email: {error_message}",
                code=error_code,
                upstream_status=_upstream_status(e),
                original_error=error_message,
            ) from e

        except BotoCoreError as e:
            logger.error("SES unreachable", error=str(e), to=message.recipients)

            raise EmailError(
                f"Failed to reach SES: {e}",
                code=type(e).__name__,
                original_error=str(e),
            ) from e

        logger.info(
            "Email sent successfully",
            message_id=response["MessageId"],
        )

        return {
            "message_id": response["MessageId"],
            "status": "sent",
            "to": message.recipients,
            "from": message.sender,
            "subject": message.subject,
        }

    @staticmethod
    def _build_body(message: EmailMessage) -> dict[str, Any]:
        body: dict[str, Any] = {"Text": {"Data": message.body_text, "Charset": "UTF-8"}}
        if message.body_html:
            body["Html"] = {"Data": message.body_html, "Charset": "UTF-8"}
        return body


def get_email_service(region_name: str | None = None) -> EmailService:
    """Factory function to get an EmailService instance.

    Args:
        region_name: Optional AWS region override.

    Returns:
        Configured EmailService instance.
    """
    return EmailService(region_name=region_name)
