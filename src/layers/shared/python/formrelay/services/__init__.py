"""Service classes for email delivery and notification dispatch."""

from formrelay.services.email_service import EmailService, get_email_service
from formrelay.services.notification_dispatcher import NotificationDispatcher

__all__ = [
    "EmailService",
    "get_email_service",
    "NotificationDispatcher",
]
