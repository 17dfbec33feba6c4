"""Received event: one outstanding delivery of a message."""

from __future__ import annotations

import logging
from functools import cached_property
from typing import TYPE_CHECKING, Any, Mapping, Optional, Union

from gpubsub.errors import PreconditionError
from gpubsub.message import Message
from gpubsub.models.response import OperationResult, ReceivedRecord

if TYPE_CHECKING:
    from gpubsub.subscription import Subscription

logger = logging.getLogger(__name__)


class ReceivedEvent:
    """
    A message delivered by a pull, paired with its ack token.

    The ack token identifies this delivery, not the message: a
    redelivered message arrives with a different ``ack_id``. The event
    keeps a non-owning reference to the subscription that pulled it so
    that acknowledge and deadline calls can be routed without passing
    the subscription around.
    """

    def __init__(self, record: ReceivedRecord, subscription: Optional[Subscription] = None):
        self._record = record
        self.subscription = subscription

    @classmethod
    def from_wire_record(
        cls,
        record: Union[ReceivedRecord, Mapping[str, Any]],
        subscription: Optional[Subscription] = None,
    ) -> ReceivedEvent:
        """Build an event from one entry of a pull response's ``receivedMessages``."""
        if not isinstance(record, ReceivedRecord):
            record = ReceivedRecord.model_validate(record)
        return cls(record, subscription)

    @property
    def ack_id(self) -> str:
        """Ack token issued by the service for this delivery."""
        return self._record.ack_id

    @cached_property
    def message(self) -> Message:
        """The delivered message, decoded on first access."""
        return Message.from_wire_record(self._record.message)

    def acknowledge(self) -> bool:
        """
        Acknowledge this delivery.

        Acknowledging more than once is allowed; the service treats it as
        a no-op.

        Raises:
            PreconditionError: the event has no subscription
            ApiError: the service rejected the acknowledgment
        """
        self._ensure_subscription()
        return self.subscription.acknowledge(self.ack_id)

    ack = acknowledge

    def extend_deadline(self, seconds: int) -> OperationResult:
        """
        Ask for more time to process this delivery.

        Only this delivery's deadline changes; the subscription default
        is untouched. A remote failure is returned rather than raised,
        since a lost extension only leads to redelivery.

        Args:
            seconds: New deadline in seconds from now, must be positive

        Returns:
            OperationResult carrying the ApiError on failure
        """
        self._ensure_subscription()
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds <= 0:
            raise ValueError(f"Deadline must be a positive number of seconds, got {seconds!r}")
        return self.subscription.modify_ack_deadline(seconds, self.ack_id)

    delay = extend_deadline

    def nack(self) -> OperationResult:
        """Give the delivery back so the service can redeliver it right away."""
        self._ensure_subscription()
        return self.subscription.modify_ack_deadline(0, self.ack_id)

    def _ensure_subscription(self) -> None:
        if self.subscription is None:
            raise PreconditionError("Must have active subscription")

    def __repr__(self) -> str:
        return f"ReceivedEvent(ack_id={self.ack_id!r})"
