"""Tests for the contact form API handler."""

import asyncio
import json
from unittest.mock import AsyncMock, patch

from formrelay.repositories.contact_submission import ContactSubmissionRepository
from formrelay.services.email_service import EmailService
from formrelay.services.notification_dispatcher import NotificationDispatcher
from formrelay.utils.exceptions import EmailError

ADMIN_EMAIL = "admin@formrelay.test"
RECEIPT = {"message_id": "msg-1", "status": "sent"}


def _parse_body(response: dict) -> dict:
    """Parse JSON response body."""
    return json.loads(response["body"])


def _contact_event(api_gateway_event, **overrides):
    body = {"name": "Jane Doe", "email": "jane@x.com", "message": "hi"}
    body.update(overrides)
    return api_gateway_event(method="POST", path="/contact", body=body)


class TestContactForm:
    """Tests for POST /contact."""

    def test_submit_success(self, dynamodb_table, ses_identity, api_gateway_event):
        """A valid submission is stored, confirmed and returns 201."""
        from api.contact_form import handler

        response = handler(_contact_event(api_gateway_event, email="Jane@X.com"), None)

        assert response["statusCode"] == 201
        body = _parse_body(response)
        assert body["submission_id"].startswith("contact-")
        assert body["email"] == "jane@x.com"
        assert body["confirmation_sent"] is True

        stored = asyncio.run(
            ContactSubmissionRepository().get_by_id(body["submission_id"], "jane@x.com")
        )
        assert stored is not None
        assert stored.status == "new"
        assert stored.message == "hi"

    def test_admin_failure_does_not_affect_result(self, dynamodb_table, api_gateway_event):
        """The admin notice fails on every attempt; the submitter still gets 201."""
        from api.contact_form import handler

        async def fake_send(message):
            if message.recipients == [ADMIN_EMAIL]:
                raise EmailError("mailbox unavailable", upstream_status=500)
            return RECEIPT

        send_email = AsyncMock(side_effect=fake_send)
        confirmation = AsyncMock(return_value=RECEIPT)

        with patch.object(EmailService, "send_email", send_email), patch.object(
            NotificationDispatcher, "send_contact_confirmation", confirmation
        ):
            response = handler(_contact_event(api_gateway_event), None)

        assert response["statusCode"] == 201
        body = _parse_body(response)

        confirmation.assert_awaited_once()
        assert confirmation.await_args.args[0].id == body["submission_id"]
        # Background admin notice ran to completion with all its retries
        admin_calls = [
            c for c in send_email.await_args_list if c.args[0].recipients == [ADMIN_EMAIL]
        ]
        assert len(admin_calls) == 3

    def test_confirmation_failure_is_degraded(self, dynamodb_table, api_gateway_event):
        """A failed confirmation returns 202 and keeps the stored record."""
        from api.contact_form import handler

        send_email = AsyncMock(
            side_effect=EmailError("rejected", code="MessageRejected", upstream_status=400)
        )

        with patch.object(EmailService, "send_email", send_email):
            response = handler(_contact_event(api_gateway_event), None)

        assert response["statusCode"] == 202
        body = _parse_body(response)
        assert body["error_code"] == "CONFIRMATION_EMAIL_FAILED"
        assert body["confirmation_sent"] is False

        stored = asyncio.run(
            ContactSubmissionRepository().get_by_id(body["submission_id"], "jane@x.com")
        )
        assert stored is not None

    def test_confirmation_retried_before_degrading(self, dynamodb_table, api_gateway_event):
        """A transient confirmation failure is retried and the request succeeds."""
        from api.contact_form import handler

        attempts = {"confirmation": 0}

        async def flaky_send(message):
            if message.recipients == ["jane@x.com"]:
                attempts["confirmation"] += 1
                if attempts["confirmation"] == 1:
                    raise EmailError("throttled", upstream_status=429)
            return RECEIPT

        with patch.object(EmailService, "send_email", AsyncMock(side_effect=flaky_send)):
            response = handler(_contact_event(api_gateway_event), None)

        assert response["statusCode"] == 201
        assert attempts["confirmation"] == 2

    def test_missing_field(self, dynamodb_table, api_gateway_event):
        """A missing message fails validation and nothing is stored."""
        from api.contact_form import handler

        event = api_gateway_event(
            method="POST", path="/contact", body={"name": "Jane", "email": "jane@x.com"}
        )

        response = handler(event, None)

        assert response["statusCode"] == 400
        body = _parse_body(response)
        assert body["error_code"] == "VALIDATION_ERROR"
        fields = [e["field"] for e in body["details"]["errors"]]
        assert "message" in fields
        assert asyncio.run(ContactSubmissionRepository().count()) == 0

    def test_invalid_email(self, dynamodb_table, api_gateway_event):
        """A malformed email returns 400."""
        from api.contact_form import handler

        response = handler(_contact_event(api_gateway_event, email="not-an-email"), None)

        assert response["statusCode"] == 400

    def test_invalid_json(self, dynamodb_table, api_gateway_event):
        """A body that is not JSON returns 400."""
        from api.contact_form import handler

        event = api_gateway_event(method="POST", path="/contact", body="{not json")

        response = handler(event, None)

        assert response["statusCode"] == 400
        assert _parse_body(response)["message"] == "Request body must be valid JSON"

    def test_store_failure_sends_nothing(self, dynamodb_table, api_gateway_event, monkeypatch):
        """When the write fails no email is sent and 503 is returned."""
        from api.contact_form import handler

        monkeypatch.setenv("TABLE_NAME", "does-not-exist")
        send_email = AsyncMock(return_value=RECEIPT)

        with patch.object(EmailService, "send_email", send_email):
            response = handler(_contact_event(api_gateway_event), None)

        assert response["statusCode"] == 503
        assert _parse_body(response)["error_code"] == "SERVICE_UNAVAILABLE"
        send_email.assert_not_awaited()
