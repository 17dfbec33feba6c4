"""Tests for RabbitMQTransport with a mocked pika connection."""

import base64
from unittest.mock import Mock

import pika
import pytest
from pika.exceptions import ChannelClosedByBroker

from gpubsub.adapters.rabbitmq import RabbitMQTransport
from gpubsub.errors import ApiError
from gpubsub.models.request import PullOptions
from gpubsub.protocols.transport import APITransport
from gpubsub.subscription import Subscription


def delivery(tag, body, message_id=None, headers=None):
    return (
        Mock(delivery_tag=tag),
        pika.BasicProperties(message_id=message_id, headers=headers),
        body,
    )


EMPTY = (None, None, None)


class TestRabbitMQTransport:
    """Test RabbitMQTransport mapping onto a channel."""

    @pytest.fixture
    def channel(self):
        channel = Mock()
        channel.basic_get.return_value = EMPTY
        return channel

    @pytest.fixture
    def connection(self, channel):
        connection = Mock(spec=pika.BlockingConnection)
        connection.channel.return_value = channel
        return connection

    @pytest.fixture
    def transport(self, connection):
        return RabbitMQTransport(connection, wait_timeout=1.0)

    def test_implements_protocol(self, transport):
        assert isinstance(transport, APITransport)

    def test_immediate_pull_encodes_wire_records(self, transport, channel):
        """basic_get deliveries become wire records keyed by channel and delivery tag."""
        channel.basic_get.side_effect = [
            delivery(7, b"hello", message_id="m-7", headers={"origin": "test"}),
            EMPTY,
        ]

        response = transport.pull("queue-1", PullOptions(immediate=True, max_messages=5))

        assert response.success is True
        assert response.data == {
            "receivedMessages": [
                {
                    "ackId": "0-7",
                    "message": {
                        "data": base64.b64encode(b"hello").decode("ascii"),
                        "attributes": {"origin": "test"},
                        "messageId": "m-7",
                    },
                }
            ]
        }
        channel.basic_get.assert_called_with(queue="queue-1", auto_ack=False)

    def test_immediate_pull_stops_at_max_messages(self, transport, channel):
        channel.basic_get.side_effect = [delivery(1, b"a"), delivery(2, b"b"), delivery(3, b"c")]

        response = transport.pull("queue-1", PullOptions(immediate=True, max_messages=2))

        assert [r["ackId"] for r in response.data["receivedMessages"]] == ["0-1", "0-2"]
        assert channel.basic_get.call_count == 2

    def test_empty_pull_omits_received_messages(self, transport):
        response = transport.pull("queue-1", PullOptions(immediate=True))

        assert response.success is True
        assert response.data == {}

    def test_blocking_pull_consumes_and_cancels(self, transport, channel):
        """A blocking pull waits via consume() and cancels the consumer."""
        channel.consume.return_value = iter([delivery(4, b"slow"), (None, None, None)])

        response = transport.pull("queue-1", PullOptions(immediate=False, max_messages=3))

        assert len(response.data["receivedMessages"]) == 1
        channel.consume.assert_called_once_with(
            queue="queue-1", auto_ack=False, inactivity_timeout=1.0
        )
        channel.cancel.assert_called_once()

    def test_acknowledge_acks_known_tags_once(self, transport, channel):
        """Known ack ids are acked; repeats and unknown ids are accepted silently."""
        channel.basic_get.side_effect = [delivery(5, b"x"), EMPTY]
        transport.pull("queue-1", PullOptions(immediate=True, max_messages=2))

        assert transport.acknowledge("queue-1", "0-5").success
        assert transport.acknowledge("queue-1", "0-5", "unknown").success

        channel.basic_ack.assert_called_once_with(delivery_tag=5)

    def test_zero_deadline_requeues(self, transport, channel):
        channel.basic_get.side_effect = [delivery(9, b"x"), EMPTY]
        transport.pull("queue-1", PullOptions(immediate=True, max_messages=2))

        assert transport.modify_ack_deadline("queue-1", ["0-9"], 0).success

        channel.basic_nack.assert_called_once_with(delivery_tag=9, requeue=True)

    def test_positive_deadline_is_accepted_without_effect(self, transport, channel):
        channel.basic_get.side_effect = [delivery(9, b"x"), EMPTY]
        transport.pull("queue-1", PullOptions(immediate=True, max_messages=2))

        assert transport.modify_ack_deadline("queue-1", ["0-9"], 60).success

        channel.basic_nack.assert_not_called()
        channel.basic_ack.assert_not_called()

    def test_push_endpoint_rejected(self, transport):
        response = transport.modify_push_config("queue-1", "http://example.com/hook", {})

        assert response.success is False
        assert response.data["error"]["status"] == "FAILED_PRECONDITION"
        assert response.status_code == 400

    def test_clearing_push_endpoint_accepted(self, transport):
        assert transport.modify_push_config("queue-1", None, {}).success

    def test_delete_removes_queue(self, transport, channel):
        assert transport.delete_subscription("queue-1").success
        channel.queue_delete.assert_called_once_with(queue="queue-1")

    def test_missing_queue_maps_to_not_found(self, transport, connection, channel):
        """A broker channel close with 404 becomes a NOT_FOUND envelope."""
        channel.basic_get.side_effect = ChannelClosedByBroker(404, "NOT_FOUND - no queue 'q'")

        response = transport.pull("q", PullOptions(immediate=True))

        assert response.success is False
        assert response.status_code == 404
        assert response.data["error"] == {
            "code": 404,
            "message": "NOT_FOUND - no queue 'q'",
            "status": "NOT_FOUND",
        }
        # channel reopened after the broker closed it
        assert connection.channel.call_count == 2

    def test_error_translates_through_subscription(self, transport, channel):
        channel.basic_get.side_effect = ChannelClosedByBroker(404, "NOT_FOUND - no queue 'q'")
        subscription = Subscription.from_descriptor({"name": "q"}, transport)

        with pytest.raises(ApiError) as exc_info:
            subscription.pull(immediate=True)

        assert exc_info.value.status == "NOT_FOUND"
        assert exc_info.value.code == 404

    def test_ack_id_from_closed_channel_does_not_ack_new_delivery(self, connection, channel):
        """Tags restart on a reopened channel; an old ack id must not match the new delivery."""
        reopened = Mock()
        reopened.basic_get.side_effect = [delivery(1, b"second"), EMPTY]
        connection.channel.side_effect = [channel, reopened]
        channel.basic_get.side_effect = [delivery(1, b"first"), EMPTY]
        channel.queue_delete.side_effect = ChannelClosedByBroker(404, "NOT_FOUND - no queue 'q'")
        transport = RabbitMQTransport(connection, wait_timeout=1.0)

        first = transport.pull("q", PullOptions(immediate=True, max_messages=2))
        old_ack_id = first.data["receivedMessages"][0]["ackId"]
        assert transport.delete_subscription("q").success is False
        second = transport.pull("q", PullOptions(immediate=True, max_messages=2))
        new_ack_id = second.data["receivedMessages"][0]["ackId"]

        assert new_ack_id != old_ack_id
        assert transport.acknowledge("q", old_ack_id).success
        reopened.basic_ack.assert_not_called()

        transport.acknowledge("q", new_ack_id)
        reopened.basic_ack.assert_called_once_with(delivery_tag=1)
