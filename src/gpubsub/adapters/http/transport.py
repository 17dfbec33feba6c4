"""REST transport implementing the APITransport protocol."""

import logging
from typing import Any, Optional, Sequence

import requests

from gpubsub.models.request import (
    AcknowledgeRequestBody,
    ModifyAckDeadlineRequestBody,
    ModifyPushConfigRequestBody,
    PullOptions,
    PullRequestBody,
)
from gpubsub.models.response import ApiResponse

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://pubsub.googleapis.com/v1"
DEFAULT_MAX_MESSAGES = 100


class HttpTransport:
    """
    Transport for the service's v1 REST API.

    The session carries authentication (typically a google-auth
    AuthorizedSession). Non-2xx responses are returned as unsuccessful
    ApiResponses; exceptions raised by the session propagate unchanged.
    No retries are attempted.
    """

    def __init__(
        self,
        session: requests.Session,
        base_url: str = DEFAULT_API_URL,
        timeout: Optional[float] = None,
    ):
        self._session = session
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout

    @property
    def base_url(self) -> str:
        return self._base_url

    def pull(self, subscription: str, options: PullOptions) -> ApiResponse:
        body: PullRequestBody = {
            "returnImmediately": options.immediate,
            "maxMessages": options.max_messages or DEFAULT_MAX_MESSAGES,
        }
        return self._call("POST", f"{subscription}:pull", body)

    def acknowledge(self, subscription: str, *ack_ids: str) -> ApiResponse:
        body: AcknowledgeRequestBody = {"ackIds": list(ack_ids)}
        return self._call("POST", f"{subscription}:acknowledge", body)

    def modify_ack_deadline(
        self, subscription: str, ack_ids: Sequence[str], seconds: int
    ) -> ApiResponse:
        body: ModifyAckDeadlineRequestBody = {
            "ackIds": list(ack_ids),
            "ackDeadlineSeconds": seconds,
        }
        return self._call("POST", f"{subscription}:modifyAckDeadline", body)

    def modify_push_config(
        self, subscription: str, endpoint: Optional[str], attributes: dict[str, str]
    ) -> ApiResponse:
        push_config: dict[str, Any] = {}
        # An empty pushConfig switches the subscription to pull delivery
        if endpoint:
            push_config["pushEndpoint"] = endpoint
        if attributes:
            push_config["attributes"] = dict(attributes)
        body: ModifyPushConfigRequestBody = {"pushConfig": push_config}
        return self._call("POST", f"{subscription}:modifyPushConfig", body)

    def delete_subscription(self, subscription: str) -> ApiResponse:
        return self._call("DELETE", subscription)

    def _call(self, method: str, path: str, body: Optional[Any] = None) -> ApiResponse:
        url = f"{self._base_url}/{path.lstrip('/')}"
        logger.debug("%s %s", method, url)

        resp = self._session.request(method, url, json=body, timeout=self._timeout)

        try:
            data = resp.json() if resp.content else {}
        except ValueError:
            logger.debug("Non-JSON response body from %s %s", method, url)
            data = {}
        if not isinstance(data, dict):
            data = {}

        return ApiResponse(success=resp.ok, data=data, status_code=resp.status_code)
