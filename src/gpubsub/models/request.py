"""Request models for subscription operations."""

from typing import Optional, TypedDict

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from gpubsub.models.base import CamelCaseModel


class PullOptions(BaseModel):
    """
    Options recognized by ``Subscription.pull``.

    Unknown keys are ignored so that callers written against newer
    service options keep working.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    # Respond at once with whatever is available instead of blocking.
    immediate: bool = True
    # Upper bound on returned events; None lets the transport decide.
    max_messages: Optional[int] = Field(
        default=None,
        gt=0,
        validation_alias=AliasChoices("max_messages", "maxMessages", "max"),
    )


class PushConfig(CamelCaseModel):
    """Push delivery configuration of a subscription."""

    push_endpoint: Optional[str] = None
    attributes: dict[str, str] = Field(default_factory=dict)


class PullRequestBody(TypedDict, total=False):
    """Body of a REST pull request."""

    returnImmediately: bool
    maxMessages: int


class AcknowledgeRequestBody(TypedDict):
    """Body of a REST acknowledge request."""

    ackIds: list[str]


class ModifyAckDeadlineRequestBody(TypedDict):
    """Body of a REST modifyAckDeadline request."""

    ackIds: list[str]
    ackDeadlineSeconds: int


class ModifyPushConfigRequestBody(TypedDict):
    """Body of a REST modifyPushConfig request."""

    pushConfig: dict
