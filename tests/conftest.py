"""Pytest configuration and fixtures."""

import json
import os
from datetime import datetime, timezone
from unittest.mock import AsyncMock

import pytest

# Set environment variables before imports
os.environ["TABLE_NAME"] = "formrelay-test"
os.environ["AWS_DEFAULT_REGION"] = "us-east-1"
os.environ["AWS_REGION"] = "us-east-1"
os.environ["AWS_ACCESS_KEY_ID"] = "testing"
os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
os.environ["SES_FROM_EMAIL"] = "noreply@formrelay.test"
os.environ["ADMIN_EMAIL"] = "admin@formrelay.test"
os.environ["ADMIN_API_KEY"] = "test-admin-key"
# Handlers build their retry policy from the environment; no waiting in tests
os.environ["INITIAL_DELAY_MS"] = "0"
os.environ["MAX_DELAY_MS"] = "0"

SENDER = "noreply@formrelay.test"
ADMIN_EMAIL = "admin@formrelay.test"
ADMIN_API_KEY = "test-admin-key"


@pytest.fixture
def aws_credentials():
    """Mock AWS credentials for moto."""
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = "us-east-1"


@pytest.fixture
def aws(aws_credentials):
    """Activate moto for every AWS service used by the app."""
    from moto import mock_aws

    with mock_aws():
        yield


@pytest.fixture
def dynamodb_table(aws):
    """Create mocked DynamoDB table."""
    import boto3

    dynamodb = boto3.resource("dynamodb", region_name="us-east-1")

    table = dynamodb.create_table(
        TableName="formrelay-test",
        KeySchema=[
            {"AttributeName": "PK", "KeyType": "HASH"},
            {"AttributeName": "SK", "KeyType": "RANGE"},
        ],
        AttributeDefinitions=[
            {"AttributeName": "PK", "AttributeType": "S"},
            {"AttributeName": "SK", "AttributeType": "S"},
            {"AttributeName": "GSI1PK", "AttributeType": "S"},
            {"AttributeName": "GSI1SK", "AttributeType": "S"},
        ],
        GlobalSecondaryIndexes=[
            {
                "IndexName": "GSI1",
                "KeySchema": [
                    {"AttributeName": "GSI1PK", "KeyType": "HASH"},
                    {"AttributeName": "GSI1SK", "KeyType": "RANGE"},
                ],
                "Projection": {"ProjectionType": "ALL"},
            },
        ],
        BillingMode="PAY_PER_REQUEST",
    )

    table.wait_until_exists()

    yield table


@pytest.fixture
def ses_identity(aws):
    """Verify the sender address in mocked SES so sends are accepted."""
    import boto3

    client = boto3.client("ses", region_name="us-east-1")
    client.verify_email_identity(EmailAddress=SENDER)
    return client


@pytest.fixture
def fast_retry_policy():
    """Retry policy with default delays, no jitter and a recorded, instant sleep."""
    from formrelay.execution.backoff import RetryConfig
    from formrelay.execution.retry_policy import RetryPolicy

    return RetryPolicy(RetryConfig(), uniform=lambda a, b: 0.0, sleep=AsyncMock())


@pytest.fixture
def sample_contact_submission():
    """Create a sample contact submission."""
    from formrelay.models.submission import ContactSubmission

    return ContactSubmission(
        id="contact-test-123",
        name="Jane Doe",
        email="jane@x.com",
        message="hi",
        submitted_at=datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_waitlist_submission():
    """Create a sample waitlist submission."""
    from formrelay.models.submission import WaitlistSubmission

    return WaitlistSubmission(
        id="waitlist-test-456",
        email="sam@example.com",
        name="Sam",
        position=6,
        submitted_at=datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def api_gateway_event():
    """Create a sample API Gateway event."""
    def _create_event(
        method: str = "POST",
        path: str = "/",
        query_params: dict = None,
        body: dict = None,
        headers: dict = None,
    ):
        return {
            "httpMethod": method,
            "path": path,
            "pathParameters": {},
            "queryStringParameters": query_params or {},
            "body": body if isinstance(body, str) else (
                json.dumps(body) if body is not None else None
            ),
            "headers": {
                "Content-Type": "application/json",
                **(headers or {}),
            },
            "requestContext": {},
        }

    return _create_event


@pytest.fixture
def admin_headers():
    """Authorization header carrying the admin API key."""
    return {"Authorization": f"Bearer {ADMIN_API_KEY}"}
