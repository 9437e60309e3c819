"""Tests for the waitlist API handler."""

import asyncio
import json
from unittest.mock import AsyncMock, patch

from formrelay.repositories.waitlist_submission import WaitlistSubmissionRepository
from formrelay.services.email_service import EmailService
from formrelay.utils.exceptions import EmailError

RECEIPT = {"message_id": "msg-1", "status": "sent"}


def _parse_body(response: dict) -> dict:
    """Parse JSON response body."""
    return json.loads(response["body"])


def _signup(api_gateway_event, email: str, name: str | None = None):
    body = {"email": email}
    if name is not None:
        body["name"] = name
    return api_gateway_event(method="POST", path="/waitlist", body=body)


class TestWaitlist:
    """Tests for POST /waitlist."""

    def test_join_success(self, dynamodb_table, ses_identity, api_gateway_event):
        """A new signup is stored at position 1 and confirmed."""
        from api.waitlist import handler

        response = handler(_signup(api_gateway_event, "sam@example.com", "Sam"), None)

        assert response["statusCode"] == 201
        body = _parse_body(response)
        assert body["submission_id"].startswith("waitlist-")
        assert body["position"] == 1
        assert body["already_registered"] is False
        assert body["confirmation_sent"] is True

    def test_positions_increase(self, dynamodb_table, api_gateway_event):
        """Each new signup joins at the back of the line."""
        from api.waitlist import handler

        with patch.object(EmailService, "send_email", AsyncMock(return_value=RECEIPT)):
            positions = [
                _parse_body(handler(_signup(api_gateway_event, f"user{i}@x.com"), None))["position"]
                for i in range(3)
            ]

        assert positions == [1, 2, 3]

    def test_duplicate_signup_returns_existing(self, dynamodb_table, api_gateway_event):
        """Signing up twice returns the original spot without a new record or email."""
        from api.waitlist import handler

        send_email = AsyncMock(return_value=RECEIPT)
        with patch.object(EmailService, "send_email", send_email):
            first = _parse_body(handler(_signup(api_gateway_event, "sam@example.com"), None))
            sends_after_first = send_email.await_count

            response = handler(_signup(api_gateway_event, "SAM@Example.com"), None)

        assert response["statusCode"] == 200
        body = _parse_body(response)
        assert body["already_registered"] is True
        assert body["submission_id"] == first["submission_id"]
        assert body["position"] == first["position"]
        assert send_email.await_count == sends_after_first
        assert asyncio.run(WaitlistSubmissionRepository().count(None)) == 1

    def test_confirmation_failure_is_degraded(self, dynamodb_table, api_gateway_event):
        """A failed welcome email returns 202 with the assigned position."""
        from api.waitlist import handler

        send_email = AsyncMock(side_effect=EmailError("unavailable", upstream_status=503))

        with patch.object(EmailService, "send_email", send_email):
            response = handler(_signup(api_gateway_event, "sam@example.com"), None)

        assert response["statusCode"] == 202
        body = _parse_body(response)
        assert body["error_code"] == "CONFIRMATION_EMAIL_FAILED"
        assert body["position"] == 1
        assert body["confirmation_sent"] is False

        stored = asyncio.run(WaitlistSubmissionRepository().find_by_email("sam@example.com"))
        assert stored is not None
        assert stored.id == body["submission_id"]

    def test_invalid_email(self, dynamodb_table, api_gateway_event):
        """A malformed email returns 400."""
        from api.waitlist import handler

        response = handler(_signup(api_gateway_event, "not-an-email"), None)

        assert response["statusCode"] == 400
        assert _parse_body(response)["error_code"] == "VALIDATION_ERROR"

    def test_missing_body(self, dynamodb_table, api_gateway_event):
        """An empty request fails validation."""
        from api.waitlist import handler

        response = handler(api_gateway_event(method="POST", path="/waitlist"), None)

        assert response["statusCode"] == 400

    def test_store_failure(self, dynamodb_table, api_gateway_event, monkeypatch):
        """An unreachable table returns 503."""
        from api.waitlist import handler

        monkeypatch.setenv("TABLE_NAME", "does-not-exist")

        response = handler(_signup(api_gateway_event, "sam@example.com"), None)

        assert response["statusCode"] == 503
