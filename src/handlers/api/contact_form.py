"""Contact form API handler (no authentication required)."""

from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from formrelay.models.submission import ContactRequest
from formrelay.repositories.contact_submission import ContactSubmissionRepository
from formrelay.services.notification_dispatcher import NotificationDispatcher
from formrelay.utils.exceptions import NotificationError, StoreError, ValidationError
from formrelay.utils.responses import (
    created,
    degraded,
    error,
    internal_error,
    parse_json_body,
    service_unavailable,
    validation_error,
)
from formrelay.utils.runtime import run_request

logger = structlog.get_logger()


def handler(event: dict[str, Any], context: Any) -> dict:
    """Handle contact form submissions.

    Routes:
        POST /contact
    """
    dispatcher = NotificationDispatcher()
    repo = ContactSubmissionRepository()
    return run_request(lambda: submit_contact(event, repo, dispatcher), dispatcher)


async def submit_contact(
    event: dict[str, Any],
    repo: ContactSubmissionRepository,
    dispatcher: NotificationDispatcher,
) -> dict:
    """Persist a contact submission, then confirm it by email.

    Returns 201 when both succeed, 202 when the submission was saved but the
    confirmation could not be delivered.
    """
    try:
        body = parse_json_body(event)
        logger.info("Contact form submission received", email=body.get("email"))

        try:
            request = ContactRequest.model_validate(body)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e

        submission = await repo.create_submission(
            name=request.name,
            email=request.email,
            message=request.message,
        )
        logger.info("Contact submission saved", submission_id=submission.id)

        data = {"submission_id": submission.id, "email": submission.email}

        dispatcher.notify_admin_of_contact(submission)

        try:
            await dispatcher.send_contact_confirmation(submission)
        except NotificationError as e:
            logger.error(
                "Contact confirmation not delivered",
                submission_id=submission.id,
                error=str(e),
            )
            return degraded(
                {**data, "confirmation_sent": False},
                message=(
                    "Your message was saved, but we could not send the confirmation email. "
                    "Please contact us directly if you do not hear back."
                ),
                error_code="CONFIRMATION_EMAIL_FAILED",
            )

        return created({
            **data,
            "confirmation_sent": True,
            "message": "Thank you for contacting us! We will get back to you within 24-48 hours.",
        })

    except ValidationError as e:
        logger.warning("Contact form validation failed", errors=e.errors)
        return validation_error(e.errors)
    except ValueError as e:
        return error(str(e), 400)
    except StoreError as e:
        logger.error("Contact submission not saved", error=str(e))
        return service_unavailable(str(e))
    except Exception as e:
        logger.exception("Contact form handler error", error=str(e))
        return internal_error(
            "An error occurred while processing your message. Please try again later.",
            str(e),
        )
