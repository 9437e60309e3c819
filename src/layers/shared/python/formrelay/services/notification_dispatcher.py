"""Notification dispatch on top of the retry policy.

Two send classes:
- critical: the requester is waiting on it. Final failure raises
  NotificationError and the caller reports a degraded success.
- non-critical: internal notices. Final failure is logged and dropped.
  These can run as background tasks; failures never reach the caller.

Callers persist the submission before dispatching anything, and never undo
the write when a send fails.
"""

import asyncio
import os
from typing import Any

import structlog

from formrelay.execution.retry_policy import RetryPolicy
from formrelay.models.email import EmailMessage
from formrelay.models.submission import ContactSubmission, WaitlistSubmission
from formrelay.services import email_templates
from formrelay.services.email_service import EmailService, get_email_service
from formrelay.utils.exceptions import NotificationError

logger = structlog.get_logger()


class NotificationDispatcher:
    """Sends confirmation and admin emails with retry."""

    def __init__(
        self,
        email_service: EmailService | None = None,
        retry_policy: RetryPolicy | None = None,
        sender: str | None = None,
        admin_email: str | None = None,
    ):
        """Initialize the dispatcher.

        Args:
            email_service: Email gateway. Defaults to an SES-backed service.
            retry_policy: Retry policy. Defaults to env-configured RetryPolicy.
            sender: From address. Falls back to SES_FROM_EMAIL env var.
            admin_email: Admin inbox. Falls back to ADMIN_EMAIL env var.
        """
        self.email_service = email_service or get_email_service()
        self.retry_policy = retry_policy or RetryPolicy()
        self.sender = sender or os.environ.get("SES_FROM_EMAIL", "noreply@formrelay.dev")
        self.admin_email = admin_email or os.environ.get("ADMIN_EMAIL", "info@formrelay.dev")
        self._pending: set[asyncio.Task] = set()
        self.logger = logger.bind(service="notification_dispatcher")

    async def send_critical(self, message: EmailMessage, description: str) -> dict[str, Any]:
        """Send a message the requester depends on.

        Args:
            message: Rendered message.
            description: Label for logs and the error message.

        Returns:
            Gateway receipt.

        Raises:
            NotificationError: After a non-retryable failure or exhausted retries.
        """
        try:
            receipt = await self.retry_policy.execute_with_retry(
                lambda: self.email_service.send_email(message),
                operation_name=description,
                context={"send_class": "critical", "to": message.recipients},
            )
        except Exception as e:
            self.logger.error(
                "Critical notification failed",
                description=description,
                error=str(e),
                to=message.recipients,
            )
            raise NotificationError(f"Failed to send {description}: {e}", cause=e) from e

        self.logger.info("Critical notification sent", description=description)
        return receipt

    async def send_non_critical(self, message: EmailMessage, description: str) -> bool:
        """Send a best-effort message. Never raises for delivery failures.

        Returns:
            True if the message was accepted by the gateway.
        """
        result = await self.retry_policy.execute(
            lambda: self.email_service.send_email(message),
            operation_name=description,
            context={"send_class": "non_critical", "to": message.recipients},
        )

        if result.success:
            self.logger.info("Non-critical notification sent", description=description)
            return True

        self.logger.warning(
            "Non-critical notification failed",
            description=description,
            error=str(result.error),
            attempts=result.attempts,
            non_retryable=result.non_retryable,
        )
        return False

    def dispatch_background(self, message: EmailMessage, description: str) -> asyncio.Task:
        """Start a non-critical send without waiting for it.

        Must be called from a running event loop. The task is tracked until it
        finishes; see ``drain``.
        """
        task = asyncio.get_running_loop().create_task(
            self.send_non_critical(message, description),
            name=f"notify:{description}",
        )
        self._pending.add(task)
        task.add_done_callback(self._on_background_done)
        return task

    def _on_background_done(self, task: asyncio.Task) -> None:
        self._pending.discard(task)
        if task.cancelled():
            self.logger.warning("Background notification cancelled", task=task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            self.logger.error(
                "Background notification crashed",
                task=task.get_name(),
                error=str(exc),
                error_type=type(exc).__name__,
            )

    @property
    def pending_count(self) -> int:
        """Number of background sends still running."""
        return len(self._pending)

    async def drain(self) -> None:
        """Wait for every background send to finish.

        Lambda freezes the process once the handler returns, so handlers call
        this before closing their event loop.
        """
        if self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    async def send_contact_confirmation(self, submission: ContactSubmission) -> dict[str, Any]:
        """Critical: confirmation to the contact form submitter."""
        message = email_templates.contact_confirmation(submission, self.sender, self.admin_email)
        return await self.send_critical(message, f"contact confirmation to {submission.email}")

    def notify_admin_of_contact(self, submission: ContactSubmission) -> asyncio.Task:
        """Non-critical, background: tell the admin about a contact submission."""
        message = email_templates.contact_notification(submission, self.sender, self.admin_email)
        return self.dispatch_background(message, f"contact notification to {self.admin_email}")

    async def send_waitlist_confirmation(self, submission: WaitlistSubmission) -> dict[str, Any]:
        """Critical: welcome email to the new waitlist member."""
        message = email_templates.waitlist_confirmation(submission, self.sender, self.admin_email)
        return await self.send_critical(message, f"waitlist confirmation to {submission.email}")

    def notify_admin_of_waitlist(self, submission: WaitlistSubmission) -> asyncio.Task:
        """Non-critical, background: tell the admin about a waitlist signup."""
        message = email_templates.waitlist_notification(submission, self.sender, self.admin_email)
        return self.dispatch_background(message, f"waitlist notification to {self.admin_email}")
