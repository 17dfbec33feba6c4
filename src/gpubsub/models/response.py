"""Response models for subscription operations."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, Optional

from pydantic import Field

from gpubsub.models.base import CamelCaseModel
from gpubsub.models.request import PushConfig

if TYPE_CHECKING:
    from gpubsub.errors import ApiError


@dataclass
class ApiResponse:
    """
    Structured result of one transport call.

    ``data`` holds the decoded response body: the payload on success,
    the service error envelope on failure.
    """

    success: bool
    data: dict[str, Any] = field(default_factory=dict)
    status_code: Optional[int] = None


@dataclass(frozen=True)
class OperationResult:
    """Outcome of an operation that reports remote failure as a value."""

    success: bool
    error: Optional[ApiError] = None

    @classmethod
    def ok(cls) -> OperationResult:
        return cls(success=True)

    @classmethod
    def failed(cls, error: ApiError) -> OperationResult:
        return cls(success=False, error=error)

    def __bool__(self) -> bool:
        return self.success


class WireMessage(CamelCaseModel):
    """Message as it appears inside a pull response."""

    data: str = ""  # base64
    attributes: dict[str, str] = Field(default_factory=dict)
    message_id: str = ""
    publish_time: Optional[datetime] = None


class ReceivedRecord(CamelCaseModel):
    """One delivery inside a pull response."""

    ack_id: str = ""
    message: WireMessage = Field(default_factory=WireMessage)


class PullResponseBody(CamelCaseModel):
    """Body of a successful pull response; the key is omitted when empty."""

    received_messages: list[ReceivedRecord] = Field(default_factory=list)


class SubscriptionDescriptor(CamelCaseModel):
    """Subscription resource as described by the service."""

    name: str
    topic: str = ""
    ack_deadline_seconds: Optional[int] = None
    push_config: PushConfig = Field(default_factory=PushConfig)
