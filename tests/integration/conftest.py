"""Fixtures for RabbitMQ integration tests."""

import subprocess
import time
import uuid

import pika
import pytest
from pika.exceptions import AMQPConnectionError

from gpubsub.adapters.rabbitmq import RabbitMQTransport
from gpubsub.subscription import Subscription

RABBITMQ_PORT = 5673  # Non-default port to avoid conflicts
CONTAINER_NAME = "gpubsub-rabbitmq-test"
STARTUP_TIMEOUT = 60.0


def _connection_parameters() -> pika.ConnectionParameters:
    return pika.ConnectionParameters(host="localhost", port=RABBITMQ_PORT)


def _wait_for_broker(deadline: float) -> None:
    while True:
        try:
            pika.BlockingConnection(_connection_parameters()).close()
            return
        except AMQPConnectionError:
            if time.monotonic() > deadline:
                raise
            time.sleep(1)


@pytest.fixture(scope="session")
def rabbitmq_container():
    """Run a throwaway RabbitMQ broker in Docker for the session."""
    subprocess.run(["docker", "rm", "-f", CONTAINER_NAME], capture_output=True)
    subprocess.run(
        ["docker", "run", "-d", "--name", CONTAINER_NAME, "-p", f"{RABBITMQ_PORT}:5672", "rabbitmq:3"],
        check=True,
        capture_output=True,
    )

    try:
        _wait_for_broker(time.monotonic() + STARTUP_TIMEOUT)
        yield
    finally:
        subprocess.run(["docker", "rm", "-f", CONTAINER_NAME], capture_output=True)


@pytest.fixture(scope="session")
def rabbitmq_connection(rabbitmq_container) -> pika.BlockingConnection:
    """Provide RabbitMQ connection."""
    connection = pika.BlockingConnection(_connection_parameters())
    yield connection
    connection.close()


@pytest.fixture
def test_queue(rabbitmq_connection) -> str:
    """Declare a uniquely named queue standing in for a subscription."""
    queue_name = f"projects-test-subscriptions-{uuid.uuid4()}"
    channel = rabbitmq_connection.channel()
    channel.queue_declare(queue=queue_name, durable=True)

    yield queue_name

    channel.queue_delete(queue=queue_name)


@pytest.fixture
def transport(rabbitmq_connection) -> RabbitMQTransport:
    """Transport with a short wait for blocking pulls."""
    return RabbitMQTransport(rabbitmq_connection, wait_timeout=2.0)


@pytest.fixture
def queue_subscription(test_queue, transport) -> Subscription:
    """Subscription bound to the test queue."""
    return Subscription.from_descriptor({"name": test_queue, "topic": test_queue}, transport)


@pytest.fixture
def publish(rabbitmq_connection):
    """Publish raw bodies straight to a queue."""
    channel = rabbitmq_connection.channel()

    def _publish(queue: str, body: bytes, **properties) -> None:
        channel.basic_publish(
            exchange="",
            routing_key=queue,
            body=body,
            properties=pika.BasicProperties(**properties),
        )

    return _publish
