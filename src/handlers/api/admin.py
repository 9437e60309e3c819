"""Admin API handler for contact and waitlist submissions.

All endpoints require the ``Authorization: Bearer <ADMIN_API_KEY>`` header.
"""

from typing import Any

import structlog
from pydantic import ValidationError as PydanticValidationError

from formrelay.models.submission import ContactStatus, UpdateStatusRequest, WaitlistStatus
from formrelay.repositories.contact_submission import ContactSubmissionRepository
from formrelay.repositories.waitlist_submission import WaitlistSubmissionRepository
from formrelay.utils.auth import require_admin_key
from formrelay.utils.exceptions import (
    ConflictError,
    NotFoundError,
    StoreError,
    UnauthorizedError,
    ValidationError,
)
from formrelay.utils.responses import (
    error,
    internal_error,
    not_found,
    parse_json_body,
    service_unavailable,
    success,
    unauthorized,
    validation_error,
)
from formrelay.utils.runtime import run_request

logger = structlog.get_logger()

DEFAULT_LIMIT = 100
MAX_LIMIT = 1000


def handler(event: dict[str, Any], context: Any) -> dict:
    """Handle admin API requests.

    Routes:
        GET   /admin?action=list&type={contact|waitlist}[&status=][&limit=]
        GET   /admin?action=get&type={contact|waitlist}&id=&email=
        GET   /admin?action=stats
        PATCH /admin  {type, id, email, status}
    """
    contacts = ContactSubmissionRepository()
    waitlist = WaitlistSubmissionRepository()
    return run_request(lambda: route(event, contacts, waitlist))


async def route(
    event: dict[str, Any],
    contacts: ContactSubmissionRepository,
    waitlist: WaitlistSubmissionRepository,
) -> dict:
    """Dispatch an admin request to the matching operation."""
    try:
        require_admin_key(event)

        http_method = event.get("httpMethod", "").upper()
        query_params = event.get("queryStringParameters", {}) or {}
        action = query_params.get("action")
        submission_type = query_params.get("type")

        logger.info("Admin request received", method=http_method, action=action)

        if http_method == "PATCH":
            return await update_status(event, contacts, waitlist)
        if http_method != "GET":
            return error("Method not allowed", 405)

        if action == "list":
            return await list_submissions(submission_type, query_params, contacts, waitlist)
        elif action == "get":
            return await get_submission(submission_type, query_params, contacts, waitlist)
        elif action == "stats":
            return await get_stats(contacts, waitlist)
        else:
            return error('Invalid action parameter. Use "list", "get" or "stats"', 400)

    except UnauthorizedError as e:
        return unauthorized(e.message)
    except ValidationError as e:
        return validation_error(e.errors)
    except NotFoundError as e:
        return not_found(e.resource_type, e.resource_id)
    except ConflictError as e:
        return error(e.message, 409, e.error_code)
    except ValueError as e:
        return error(str(e), 400)
    except StoreError as e:
        logger.error("Admin store request failed", error=str(e))
        return service_unavailable(str(e))
    except Exception as e:
        logger.exception("Admin handler error", error=str(e))
        return internal_error("Internal server error", str(e))


def _parse_limit(query_params: dict) -> int:
    raw = query_params.get("limit")
    if raw is None:
        return DEFAULT_LIMIT
    try:
        limit = int(raw)
    except ValueError as e:
        raise ValueError("limit must be an integer") from e
    if not 1 <= limit <= MAX_LIMIT:
        raise ValueError(f"limit must be between 1 and {MAX_LIMIT}")
    return limit


def _require_type(submission_type: str | None) -> str:
    if submission_type not in ("contact", "waitlist"):
        raise ValueError('Invalid type parameter. Use "contact" or "waitlist"')
    return submission_type


async def list_submissions(
    submission_type: str | None,
    query_params: dict,
    contacts: ContactSubmissionRepository,
    waitlist: WaitlistSubmissionRepository,
) -> dict:
    """List submissions of one type, optionally filtered by status."""
    submission_type = _require_type(submission_type)
    limit = _parse_limit(query_params)
    status = query_params.get("status") or None

    if submission_type == "contact":
        items = await contacts.list_all(status=status, limit=limit)
    else:
        items = await waitlist.list_all(status=status, limit=limit)

    return success({
        "type": submission_type,
        "items": [item.model_dump(mode="json") for item in items],
        "count": len(items),
    })


async def get_submission(
    submission_type: str | None,
    query_params: dict,
    contacts: ContactSubmissionRepository,
    waitlist: WaitlistSubmissionRepository,
) -> dict:
    """Get a single submission by ID and email."""
    submission_type = _require_type(submission_type)
    submission_id = query_params.get("id")
    email = query_params.get("email")
    if not submission_id or not email:
        raise ValueError("id and email query parameters are required")

    if submission_type == "contact":
        submission = await contacts.get_by_id(submission_id, email)
        resource_type = "ContactSubmission"
    else:
        submission = await waitlist.find_by_email(email)
        if submission is not None and submission.id != submission_id:
            submission = None
        resource_type = "WaitlistSubmission"

    if submission is None:
        return not_found(resource_type, submission_id)

    return success(submission)


async def get_stats(
    contacts: ContactSubmissionRepository,
    waitlist: WaitlistSubmissionRepository,
) -> dict:
    """Count submissions per status."""
    contact_stats = {"total": await contacts.count()}
    for status in ContactStatus:
        contact_stats[status.value] = await contacts.count(status)

    waitlist_stats = {"total": await waitlist.count(None)}
    for status in WaitlistStatus:
        waitlist_stats[status.value] = await waitlist.count(status)

    return success({"contacts": contact_stats, "waitlist": waitlist_stats})


async def update_status(
    event: dict[str, Any],
    contacts: ContactSubmissionRepository,
    waitlist: WaitlistSubmissionRepository,
) -> dict:
    """Move a submission to a new status."""
    try:
        request = UpdateStatusRequest.model_validate(parse_json_body(event))
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e

    if request.type == "contact":
        submission = await contacts.update_status(request.id, request.email, request.status)
    else:
        submission = await waitlist.update_status(request.id, request.email, request.status)

    logger.info(
        "Submission status updated",
        submission_id=submission.id,
        status=submission.status,
    )
    return success(submission)
