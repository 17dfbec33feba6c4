"""Subscription: pull, acknowledge and administer a named subscription."""

from __future__ import annotations

import logging
from typing import Any, Mapping, Optional, Union

from gpubsub.errors import ApiError, PreconditionError
from gpubsub.event import ReceivedEvent
from gpubsub.models.request import PullOptions
from gpubsub.models.response import (
    OperationResult,
    PullResponseBody,
    SubscriptionDescriptor,
)
from gpubsub.protocols.transport import APITransport

logger = logging.getLogger(__name__)


class Subscription:
    """
    A named, durable attachment to a topic.

    Subscriptions are built from a service descriptor. Until a transport
    is attached with ``bind`` every remote operation raises
    PreconditionError. Deleting a subscription does not invalidate the
    object; later calls simply fail remotely.

    Error policy:
    - pull, acknowledge and delete raise ApiError on remote failure
    - modify_ack_deadline and update_endpoint return an OperationResult
    """

    def __init__(self, descriptor: SubscriptionDescriptor, transport: Optional[APITransport] = None):
        self._descriptor = descriptor
        self._transport = transport

    @classmethod
    def from_descriptor(
        cls,
        descriptor: Union[SubscriptionDescriptor, Mapping[str, Any]],
        transport: Optional[APITransport] = None,
    ) -> Subscription:
        """
        Create a subscription from its service descriptor.

        Args:
            descriptor: Subscription resource (``name``, ``topic``,
                ``ackDeadlineSeconds``, ``pushConfig``)
            transport: Transport to bind immediately, if any
        """
        if isinstance(descriptor, SubscriptionDescriptor):
            descriptor = descriptor.model_copy(deep=True)
        else:
            descriptor = SubscriptionDescriptor.model_validate(descriptor)
        return cls(descriptor, transport)

    @property
    def name(self) -> str:
        """Fully-qualified subscription path."""
        return self._descriptor.name

    @property
    def topic(self) -> str:
        """Fully-qualified path of the topic this subscription receives from."""
        return self._descriptor.topic

    @property
    def deadline(self) -> Optional[int]:
        """
        Default number of seconds a subscriber has to acknowledge a message.

        If the deadline passes without an acknowledgment the service will
        eventually redeliver the message.
        """
        return self._descriptor.ack_deadline_seconds

    @property
    def endpoint(self) -> Optional[str]:
        """Push endpoint URL, or None for pull-only delivery."""
        return self._descriptor.push_config.push_endpoint

    @property
    def transport(self) -> Optional[APITransport]:
        return self._transport

    @property
    def is_bound(self) -> bool:
        return self._transport is not None

    def bind(self, transport: APITransport) -> Subscription:
        """Attach a transport, making remote operations available."""
        self._transport = transport
        return self

    def pull(
        self, options: Union[PullOptions, Mapping[str, Any], None] = None, **kwargs: Any
    ) -> list[ReceivedEvent]:
        """
        Pull messages from the subscription.

        With ``immediate=True`` the service responds at once, possibly with
        no messages. Otherwise the call blocks until messages are available
        or the service gives up. An empty list is a normal result.

        Args:
            options: PullOptions, or a mapping of option names
            **kwargs: Option names given directly, e.g. ``max_messages=10``

        Returns:
            Events in the order returned by the service

        Raises:
            PreconditionError: no transport attached
            ApiError: the service rejected the pull
        """
        transport = self._ensure_transport()
        options = _pull_options(options, kwargs)

        logger.debug(
            "Pulling from %s (immediate=%s, max_messages=%s)",
            self.name,
            options.immediate,
            options.max_messages,
        )
        response = transport.pull(self.name, options)
        if not response.success:
            raise ApiError.from_response(response)

        body = PullResponseBody.model_validate(response.data or {})
        events = [ReceivedEvent(record, self) for record in body.received_messages]
        logger.debug("Pulled %d message(s) from %s", len(events), self.name)
        return events

    def acknowledge(self, ack_id: str, *ack_ids: str) -> bool:
        """
        Acknowledge one or more deliveries in a single request.

        Acknowledging a delivery more than once, or after its deadline
        expired, does not raise; the message may already have been
        redelivered in the latter case.

        Raises:
            PreconditionError: no transport attached
            ApiError: the service rejected the acknowledgment
        """
        transport = self._ensure_transport()
        ids = (ack_id, *ack_ids)

        logger.debug("Acknowledging %d message(s) on %s", len(ids), self.name)
        response = transport.acknowledge(self.name, *ids)
        if not response.success:
            raise ApiError.from_response(response)
        return True

    ack = acknowledge

    def modify_ack_deadline(self, seconds: int, ack_id: str, *ack_ids: str) -> OperationResult:
        """
        Change the ack deadline of specific deliveries.

        A deadline of 0 makes the deliveries eligible for redelivery at
        once. The subscription's default deadline is not affected.

        Returns:
            OperationResult carrying the ApiError on failure
        """
        if isinstance(seconds, bool) or not isinstance(seconds, int) or seconds < 0:
            raise ValueError(f"Deadline must be a non-negative number of seconds, got {seconds!r}")
        transport = self._ensure_transport()
        ids = [ack_id, *ack_ids]

        logger.debug(
            "Setting ack deadline of %d message(s) on %s to %ds", len(ids), self.name, seconds
        )
        response = transport.modify_ack_deadline(self.name, ids, seconds)
        if not response.success:
            error = ApiError.from_response(response)
            logger.warning("Failed to modify ack deadline on %s: %s", self.name, error)
            return OperationResult.failed(error)
        return OperationResult.ok()

    def update_endpoint(self, new_endpoint: Optional[str]) -> OperationResult:
        """
        Change the push endpoint.

        The cached endpoint is updated only after the service confirms the
        change. Passing None switches the subscription to pull delivery.

        Returns:
            OperationResult carrying the ApiError on failure
        """
        transport = self._ensure_transport()

        logger.debug("Setting push endpoint of %s to %r", self.name, new_endpoint)
        response = transport.modify_push_config(self.name, new_endpoint, {})
        if not response.success:
            error = ApiError.from_response(response)
            logger.warning("Failed to update push endpoint of %s: %s", self.name, error)
            return OperationResult.failed(error)

        self._descriptor.push_config.push_endpoint = new_endpoint
        return OperationResult.ok()

    def delete(self) -> bool:
        """
        Delete the subscription. Pending messages are dropped by the service.

        Raises:
            PreconditionError: no transport attached
            ApiError: the service rejected the deletion
        """
        transport = self._ensure_transport()

        logger.debug("Deleting subscription %s", self.name)
        response = transport.delete_subscription(self.name)
        if not response.success:
            raise ApiError.from_response(response)
        return True

    def _ensure_transport(self) -> APITransport:
        if self._transport is None:
            raise PreconditionError("Must have active connection")
        return self._transport

    def __repr__(self) -> str:
        return f"Subscription(name={self.name!r}, topic={self.topic!r})"


def _pull_options(
    options: Union[PullOptions, Mapping[str, Any], None], overrides: Mapping[str, Any]
) -> PullOptions:
    if not isinstance(options, PullOptions):
        options = PullOptions.model_validate(options or {})
    if overrides:
        update = PullOptions.model_validate(overrides).model_dump(exclude_unset=True)
        options = options.model_copy(update=update)
    return options
