"""Message handler protocol definitions."""

from typing import Protocol, Any, runtime_checkable


@runtime_checkable
class MessageHandler(Protocol):
    """
    Protocol for handlers driven by MessageConsumer.

    Handlers receive validated request objects and are responsible for
    processing them. The consumer acknowledges the delivery only after
    ``handle`` returns.
    """

    def handle(self, request: Any) -> None:
        """
        Process a validated request.

        Args:
            request: Validated request object (type depends on handler)

        Note:
            If the handler raises, the delivery is not acknowledged and the
            service redelivers it once the ack deadline passes.
        """
        ...
