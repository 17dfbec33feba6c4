"""Shared fixtures for gpubsub tests."""

import base64
from unittest.mock import Mock

import pytest

from gpubsub.models.response import ApiResponse
from gpubsub.protocols.transport import APITransport
from gpubsub.subscription import Subscription

SUBSCRIPTION_NAME = "projects/test/subscriptions/sub-42"
TOPIC_NAME = "projects/test/topics/topic-7"


def received_record(data: bytes, ack_id="ack-id-123456789", message_id="msg-id-123456789", **attrs):
    """Build one entry of a pull response's receivedMessages."""
    return {
        "ackId": ack_id,
        "message": {
            "data": base64.b64encode(data).decode("ascii"),
            "attributes": dict(attrs),
            "messageId": message_id,
        },
    }


def error_response(code: int, status: str, message: str, reason: str) -> ApiResponse:
    """Build a failed response carrying the service error envelope."""
    return ApiResponse(
        success=False,
        data={
            "error": {
                "code": code,
                "message": message,
                "errors": [{"message": message, "domain": "global", "reason": reason}],
                "status": status,
            }
        },
        status_code=code,
    )


@pytest.fixture
def mock_transport():
    """Create a mock transport that succeeds by default."""
    transport = Mock(spec=APITransport)
    ok = ApiResponse(success=True, status_code=200)
    transport.pull.return_value = ApiResponse(success=True, data={}, status_code=200)
    transport.acknowledge.return_value = ok
    transport.modify_ack_deadline.return_value = ok
    transport.modify_push_config.return_value = ok
    transport.delete_subscription.return_value = ok
    return transport


@pytest.fixture
def subscription(mock_transport):
    """Create a bound pull subscription with a 60s ack deadline."""
    return Subscription.from_descriptor(
        {
            "name": SUBSCRIPTION_NAME,
            "topic": TOPIC_NAME,
            "ackDeadlineSeconds": 60,
        },
        mock_transport,
    )


@pytest.fixture
def already_exists_response():
    resource = SUBSCRIPTION_NAME
    return error_response(
        409,
        "ALREADY_EXISTS",
        f"Resource already exists in the project (resource={resource}).",
        "alreadyExists",
    )


@pytest.fixture
def not_found_response():
    return error_response(404, "NOT_FOUND", "Resource not found (resource=sub-42).", "notFound")


@pytest.fixture
def make_record():
    """Factory for pull response records."""
    return received_record


@pytest.fixture
def make_error():
    """Factory for failed responses carrying an error envelope."""
    return error_response
