"""Transport protocol definitions."""

from typing import Optional, Protocol, Sequence, runtime_checkable

from gpubsub.models.request import PullOptions
from gpubsub.models.response import ApiResponse


@runtime_checkable
class APITransport(Protocol):
    """
    Synchronous call surface for subscription operations.

    Every method issues exactly one remote call, blocks until it
    completes and reports the outcome as an ApiResponse. Failures below
    the transport (network errors, timeouts) are raised unchanged.
    """

    def pull(self, subscription: str, options: PullOptions) -> ApiResponse:
        """
        Pull messages from a subscription.

        Args:
            subscription: Full subscription path
                (e.g., 'projects/PROJECT_ID/subscriptions/SUB_NAME')
            options: Pull options (immediate, max_messages)

        Returns:
            ApiResponse whose data holds ``receivedMessages`` on success
        """
        ...

    def acknowledge(self, subscription: str, *ack_ids: str) -> ApiResponse:
        """
        Acknowledge deliveries in a single request.

        Args:
            subscription: Full subscription path
            *ack_ids: Ack tokens returned by pull
        """
        ...

    def modify_ack_deadline(
        self, subscription: str, ack_ids: Sequence[str], seconds: int
    ) -> ApiResponse:
        """
        Change the ack deadline of specific deliveries.

        Args:
            subscription: Full subscription path
            ack_ids: Ack tokens returned by pull
            seconds: New deadline, 0 to release the deliveries
        """
        ...

    def modify_push_config(
        self, subscription: str, endpoint: Optional[str], attributes: dict[str, str]
    ) -> ApiResponse:
        """
        Replace the push configuration of a subscription.

        Args:
            subscription: Full subscription path
            endpoint: Push endpoint URL, None for pull delivery
            attributes: Extra push configuration attributes
        """
        ...

    def delete_subscription(self, subscription: str) -> ApiResponse:
        """
        Delete a subscription.

        Args:
            subscription: Full subscription path
        """
        ...
