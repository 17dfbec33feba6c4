"""RabbitMQ transport implementing the APITransport protocol."""

import base64
import logging
from http import HTTPStatus
from typing import Any, Optional, Sequence

import pika
from pika.adapters.blocking_connection import BlockingChannel
from pika.exceptions import ChannelClosedByBroker

from gpubsub.models.request import PullOptions
from gpubsub.models.response import ApiResponse

logger = logging.getLogger(__name__)

# AMQP reply codes worth translating into service statuses
_STATUS_BY_REPLY_CODE = {
    404: (HTTPStatus.NOT_FOUND, "NOT_FOUND"),
    403: (HTTPStatus.FORBIDDEN, "PERMISSION_DENIED"),
    405: (HTTPStatus.CONFLICT, "ABORTED"),
    406: (HTTPStatus.BAD_REQUEST, "FAILED_PRECONDITION"),
}


def _error_response(code: int, status: str, message: str) -> ApiResponse:
    code = int(code)
    return ApiResponse(
        success=False,
        data={"error": {"code": code, "message": message, "status": status}},
        status_code=code,
    )


class RabbitMQTransport:
    """
    RabbitMQ transport implementing the APITransport protocol.

    Meant for local development and integration tests. The subscription
    name is used as the queue name. Ack ids pair a delivery tag with the
    channel it came from, so ids issued before a reopened channel never
    match a later delivery.
    RabbitMQ keeps unacknowledged messages until the channel closes, so
    positive deadline extensions are accepted without effect and a
    deadline of 0 requeues the message.
    """

    def __init__(self, connection: pika.BlockingConnection, wait_timeout: float = 30.0):
        """
        Args:
            connection: Open blocking connection
            wait_timeout: Seconds a non-immediate pull waits for a first message
        """
        self._connection = connection
        self._channel: BlockingChannel = connection.channel()
        self._wait_timeout = wait_timeout
        # Bumped whenever the channel is reopened; delivery tags restart per channel
        self._generation = 0
        # Map ack_id (str) -> delivery_tag (int) for acknowledge
        self._pending_acks: dict[str, int] = {}

    def pull(self, subscription: str, options: PullOptions) -> ApiResponse:
        limit = options.max_messages or 1

        try:
            if options.immediate:
                records = self._get(subscription, limit)
            else:
                records = self._consume(subscription, limit)
        except ChannelClosedByBroker as e:
            return self._broker_error(e)

        logger.debug("Pulled %d message(s) from queue %s", len(records), subscription)
        data = {"receivedMessages": records} if records else {}
        return ApiResponse(success=True, data=data, status_code=HTTPStatus.OK)

    def acknowledge(self, subscription: str, *ack_ids: str) -> ApiResponse:
        for ack_id in ack_ids:
            delivery_tag = self._pending_acks.pop(ack_id, None)
            # Unknown or already acknowledged ids are accepted, like the service does
            if delivery_tag is not None:
                self._channel.basic_ack(delivery_tag=delivery_tag)
        return ApiResponse(success=True, status_code=HTTPStatus.OK)

    def modify_ack_deadline(
        self, subscription: str, ack_ids: Sequence[str], seconds: int
    ) -> ApiResponse:
        if seconds == 0:
            for ack_id in ack_ids:
                delivery_tag = self._pending_acks.pop(ack_id, None)
                if delivery_tag is not None:
                    self._channel.basic_nack(delivery_tag=delivery_tag, requeue=True)
        return ApiResponse(success=True, status_code=HTTPStatus.OK)

    def modify_push_config(
        self, subscription: str, endpoint: Optional[str], attributes: dict[str, str]
    ) -> ApiResponse:
        if endpoint is None:
            # Queues are always pull-only
            return ApiResponse(success=True, status_code=HTTPStatus.OK)
        return _error_response(
            HTTPStatus.BAD_REQUEST,
            "FAILED_PRECONDITION",
            f"Push delivery is not supported for queue {subscription}.",
        )

    def delete_subscription(self, subscription: str) -> ApiResponse:
        try:
            self._channel.queue_delete(queue=subscription)
        except ChannelClosedByBroker as e:
            return self._broker_error(e)
        return ApiResponse(success=True, status_code=HTTPStatus.OK)

    def _get(self, queue: str, limit: int) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []
        while len(records) < limit:
            method, properties, body = self._channel.basic_get(queue=queue, auto_ack=False)
            if method is None:
                break
            records.append(self._record(method.delivery_tag, properties, body))
        return records

    def _consume(self, queue: str, limit: int) -> list[dict[str, Any]]:
        records: list[dict[str, Any]] = []

        # Use consume() with inactivity_timeout for proper timeout behavior
        for method, properties, body in self._channel.consume(
            queue=queue,
            auto_ack=False,
            inactivity_timeout=self._wait_timeout,
        ):
            if method is None:
                # Timeout reached, no message available
                break
            records.append(self._record(method.delivery_tag, properties, body))
            if len(records) >= limit:
                break

        # Cancel consumer to allow reuse
        self._channel.cancel()
        return records

    def _record(
        self, delivery_tag: int, properties: pika.BasicProperties, body: bytes
    ) -> dict[str, Any]:
        ack_id = f"{self._generation}-{delivery_tag}"
        self._pending_acks[ack_id] = delivery_tag

        headers = (properties.headers if properties else None) or {}
        return {
            "ackId": ack_id,
            "message": {
                "data": base64.b64encode(body).decode("ascii"),
                "attributes": {str(k): str(v) for k, v in headers.items()},
                "messageId": (properties.message_id if properties else None) or "",
            },
        }

    def _broker_error(self, error: ChannelClosedByBroker) -> ApiResponse:
        # The broker closes the channel on errors; reopen it for later calls
        self._channel = self._connection.channel()
        self._generation += 1
        self._pending_acks.clear()

        code, status = _STATUS_BY_REPLY_CODE.get(
            error.reply_code, (HTTPStatus.INTERNAL_SERVER_ERROR, "UNKNOWN")
        )
        logger.warning("Broker rejected request: %s %s", error.reply_code, error.reply_text)
        return _error_response(code, status, error.reply_text)
