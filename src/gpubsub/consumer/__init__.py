"""Message consumers built on Subscription.pull."""

from gpubsub.consumer.message_consumer import MessageConsumer

__all__ = ["MessageConsumer"]
