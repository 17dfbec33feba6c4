"""Generic synchronous message consumer for a subscription."""

import json
import logging
from typing import Type

from pydantic import BaseModel

from gpubsub.event import ReceivedEvent
from gpubsub.protocols.handler import MessageHandler
from gpubsub.subscription import Subscription

logger = logging.getLogger(__name__)


class MessageConsumer:
    """
    Generic synchronous message consumer.

    Responsibilities:
    - Pull events from the subscription
    - Parse and validate JSON payloads (using Pydantic)
    - Route to handler
    - Acknowledge each event once the handler returns

    The handler is responsible for:
    - Domain processing logic
    - Publishing results
    - Error handling

    Errors raised while parsing, validating or handling propagate and
    leave the failing event unacknowledged until its deadline lapses.
    Events later in the same batch are nacked before the error
    propagates, so they are redelivered right away.
    """

    def __init__(
        self,
        subscription: Subscription,
        handler: MessageHandler,
        request_model: Type[BaseModel],
        max_messages: int = 1,
    ):
        """
        Initialize message consumer.

        Args:
            subscription: Bound subscription to pull from
            handler: Message handler implementing MessageHandler protocol
            request_model: Pydantic model for validating messages
            max_messages: Upper bound on events fetched per pull
        """
        self.subscription = subscription
        self.handler = handler
        self.request_model = request_model
        self.max_messages = max_messages
        self._running = False

    def start(self) -> None:
        """Start the message consumer."""
        self._running = True

    def stop(self) -> None:
        """Stop the message consumer."""
        self._running = False

    def process_one_message(self) -> int:
        """
        Pull once and process every returned event.

        Returns:
            Number of events processed
        """
        events = self.subscription.pull(immediate=False, max_messages=self.max_messages)

        for index, event in enumerate(events):
            try:
                self._process(event)
            except Exception:
                self._release(events[index + 1 :])
                raise
        return len(events)

    def _release(self, events: list[ReceivedEvent]) -> None:
        for event in events:
            if not event.nack():
                logger.warning("Could not release event %s", event.ack_id)

    def _process(self, event: ReceivedEvent) -> None:
        message_data = json.loads(event.message.data)

        # Validate message
        request = self.request_model(**message_data)

        # Route to handler
        self.handler.handle(request)

        event.acknowledge()
        logger.debug("Processed message %s", event.message.message_id)

    def run(self) -> None:
        """
        Run the message consumer loop.

        Continuously processes messages from the subscription while running.
        Call start() before run(), and stop() to exit the loop.
        """
        while self._running:
            self.process_one_message()
