"""Waitlist API handler (no authentication required)."""

from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from formrelay.models.submission import WaitlistRequest
from formrelay.repositories.waitlist_submission import WaitlistSubmissionRepository
from formrelay.services.notification_dispatcher import NotificationDispatcher
from formrelay.utils.exceptions import NotificationError, StoreError, ValidationError
from formrelay.utils.responses import (
    created,
    degraded,
    error,
    internal_error,
    parse_json_body,
    service_unavailable,
    success,
    validation_error,
)
from formrelay.utils.runtime import run_request

logger = structlog.get_logger()


def handler(event: dict[str, Any], context: Any) -> dict:
    """Handle waitlist signups.

    Routes:
        POST /waitlist
    """
    dispatcher = NotificationDispatcher()
    repo = WaitlistSubmissionRepository()
    return run_request(lambda: join_waitlist(event, repo, dispatcher), dispatcher)


async def join_waitlist(
    event: dict[str, Any],
    repo: WaitlistSubmissionRepository,
    dispatcher: NotificationDispatcher,
) -> dict:
    """Add an email to the waitlist, or report its existing spot."""
    try:
        body = parse_json_body(event)
        logger.info("Waitlist signup received", email=body.get("email"))

        try:
            request = WaitlistRequest.model_validate(body)
        except PydanticValidationError as e:
            raise ValidationError.from_pydantic(e) from e

        existing = await repo.find_by_email(request.email)
        if existing is not None:
            logger.info("Email already on waitlist", submission_id=existing.id)
            return success({
                "submission_id": existing.id,
                "email": existing.email,
                "position": existing.position,
                "already_registered": True,
                "message": "You are already on our waitlist! We will notify you when we launch.",
            })

        submission = await repo.create_submission(email=request.email, name=request.name)
        logger.info(
            "Waitlist submission saved",
            submission_id=submission.id,
            position=submission.position,
        )

        data = {
            "submission_id": submission.id,
            "email": submission.email,
            "position": submission.position,
            "already_registered": False,
        }

        dispatcher.notify_admin_of_waitlist(submission)

        try:
            await dispatcher.send_waitlist_confirmation(submission)
        except NotificationError as e:
            logger.error(
                "Waitlist confirmation not delivered",
                submission_id=submission.id,
                error=str(e),
            )
            return degraded(
                {**data, "confirmation_sent": False},
                message=(
                    "You have been added to the waitlist, but we could not send "
                    "the confirmation email."
                ),
                error_code="CONFIRMATION_EMAIL_FAILED",
            )

        return created({
            **data,
            "confirmation_sent": True,
            "message": "Welcome to the waitlist! You will be notified when we launch.",
        })

    except ValidationError as e:
        logger.warning("Waitlist validation failed", errors=e.errors)
        return validation_error(e.errors)
    except ValueError as e:
        return error(str(e), 400)
    except StoreError as e:
        logger.error("Waitlist submission not saved", error=str(e))
        return service_unavailable(str(e))
    except Exception as e:
        logger.exception("Waitlist handler error", error=str(e))
        return internal_error(
            "An error occurred while processing your waitlist signup. Please try again later.",
            str(e),
        )
