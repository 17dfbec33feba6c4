"""RabbitMQ adapter for gpubsub transport protocol."""

from gpubsub.adapters.rabbitmq.transport import RabbitMQTransport

__all__ = ["RabbitMQTransport"]
