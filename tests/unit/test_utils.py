"""Tests for response helpers, admin auth and email templates."""

import json

import pytest

from formrelay.models.submission import ContactSubmission
from formrelay.services import email_templates
from formrelay.utils.auth import get_bearer_token, require_admin_key
from formrelay.utils.exceptions import UnauthorizedError
from formrelay.utils.responses import (
    created,
    degraded,
    internal_error,
    parse_json_body,
    service_unavailable,
)


class TestResponses:
    """Tests for API response helpers."""

    def test_created(self):
        """201 responses carry CORS headers and a JSON body."""
        response = created({"submission_id": "contact-1"})

        assert response["statusCode"] == 201
        assert response["headers"]["Access-Control-Allow-Origin"] == "*"
        assert json.loads(response["body"]) == {"submission_id": "contact-1"}

    def test_degraded_keeps_identifiers(self):
        """Degraded successes carry the record's data and an error code."""
        response = degraded(
            {"submission_id": "contact-1"}, message="saved", error_code="CONFIRMATION_EMAIL_FAILED"
        )

        body = json.loads(response["body"])
        assert response["statusCode"] == 202
        assert body["submission_id"] == "contact-1"
        assert body["error_code"] == "CONFIRMATION_EMAIL_FAILED"

    def test_error_details_hidden_by_default(self, monkeypatch):
        """Raw error text is only exposed when detailed errors are enabled."""
        monkeypatch.delenv("SHOW_DETAILED_ERRORS", raising=False)
        hidden = json.loads(internal_error("boom", "stack trace")["body"])

        monkeypatch.setenv("SHOW_DETAILED_ERRORS", "true")
        shown = json.loads(service_unavailable("table missing")["body"])

        assert "details" not in hidden
        assert shown["details"] == {"detail": "table missing"}
        assert shown["error_code"] == "SERVICE_UNAVAILABLE"

    def test_cors_origin_from_env(self, monkeypatch):
        """The allowed origin is configurable."""
        monkeypatch.setenv("CORS_ALLOWED_ORIGIN", "https://example.com")

        assert created({})["headers"]["Access-Control-Allow-Origin"] == "https://example.com"

    @pytest.mark.parametrize("raw", ["{not json", "[1, 2]"])
    def test_parse_json_body_rejects_non_objects(self, raw):
        """Malformed JSON and non-object bodies raise ValueError."""
        with pytest.raises(ValueError):
            parse_json_body({"body": raw})

    def test_parse_json_body_empty(self):
        """A missing body parses as an empty object."""
        assert parse_json_body({"body": None}) == {}


class TestAdminAuth:
    """Tests for admin API key checks."""

    def test_bearer_token_case_insensitive_header(self):
        """Header names are matched regardless of case."""
        assert get_bearer_token({"headers": {"authorization": "Bearer abc"}}) == "abc"
        assert get_bearer_token({"headers": {"Authorization": "Basic abc"}}) is None
        assert get_bearer_token({"headers": None}) is None

    def test_valid_key(self):
        """The configured key is accepted."""
        require_admin_key({"headers": {"Authorization": "Bearer test-admin-key"}})

    def test_wrong_key(self):
        """Any other token is rejected."""
        with pytest.raises(UnauthorizedError):
            require_admin_key({"headers": {"Authorization": "Bearer wrong"}})

    def test_unconfigured_key_rejects_everything(self, monkeypatch):
        """Without ADMIN_API_KEY the admin API is closed."""
        monkeypatch.delenv("ADMIN_API_KEY")

        with pytest.raises(UnauthorizedError):
            require_admin_key({"headers": {"Authorization": "Bearer test-admin-key"}})


class TestEmailTemplates:
    """Tests for rendered emails."""

    def test_html_is_escaped(self):
        """Submitted text cannot inject markup into the HTML body."""
        submission = ContactSubmission(
            name="<b>Eve</b>", email="eve@x.com", message="<script>alert(1)</script>"
        )

        message = email_templates.contact_notification(
            submission, "noreply@formrelay.test", "admin@formrelay.test"
        )

        assert "<script>" not in message.body_html
        assert "&lt;script&gt;" in message.body_html
        assert "<script>alert(1)</script>" in message.body_text

    def test_site_name_from_env(self, monkeypatch, sample_waitlist_submission):
        """The site name is configurable."""
        monkeypatch.setenv("SITE_NAME", "Acme")

        message = email_templates.waitlist_confirmation(
            sample_waitlist_submission, "noreply@formrelay.test", "admin@formrelay.test"
        )

        assert message.subject == "Welcome to the Acme Waitlist!"
        assert "number 6 in line" in message.body_text
        assert message.recipients == ["sam@example.com"]
