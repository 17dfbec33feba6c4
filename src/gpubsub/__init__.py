"""Client-side model of subscription pull and acknowledgment for Pub/Sub."""

from gpubsub.errors import (
    ApiError,
    CredentialsError,
    MessageDecodeError,
    PreconditionError,
    PubSubError,
)
from gpubsub.event import ReceivedEvent
from gpubsub.message import Message
from gpubsub.models.request import PullOptions
from gpubsub.models.response import ApiResponse, OperationResult
from gpubsub.protocols.transport import APITransport
from gpubsub.subscription import Subscription

__all__ = [
    "APITransport",
    "ApiError",
    "ApiResponse",
    "CredentialsError",
    "Message",
    "MessageDecodeError",
    "OperationResult",
    "PreconditionError",
    "PubSubError",
    "PullOptions",
    "ReceivedEvent",
    "Subscription",
]
