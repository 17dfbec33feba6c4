"""Error types raised by gpubsub."""

from __future__ import annotations

import logging
from typing import Optional

from pydantic import ValidationError

from gpubsub.models.error import ErrorEnvelope, ErrorItem
from gpubsub.models.response import ApiResponse

logger = logging.getLogger(__name__)


class PubSubError(Exception):
    """Base class for all gpubsub errors."""


class PreconditionError(PubSubError):
    """
    An operation was invoked on an object missing a required collaborator.

    This is a bug in the caller, not a remote failure, and is raised
    before any remote call is attempted.
    """


class CredentialsError(PubSubError):
    """No usable key material could be resolved at setup time."""


class MessageDecodeError(PubSubError, ValueError):
    """A pulled message payload is not valid base64."""


class ApiError(PubSubError):
    """
    Remote failure reported by the service.

    Exposes the service's numeric ``code``, machine-readable ``status``
    and human-readable ``message`` exactly as received.
    """

    def __init__(
        self,
        message: str,
        code: Optional[int] = None,
        status: Optional[str] = None,
        errors: Optional[list[ErrorItem]] = None,
        response: Optional[ApiResponse] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = status
        self.errors = errors or []
        self.response = response

    def __str__(self) -> str:
        if self.status:
            return f"{self.code} {self.status}: {self.message}"
        return self.message

    def __repr__(self) -> str:
        return f"ApiError(code={self.code!r}, status={self.status!r}, message={self.message!r})"

    @classmethod
    def from_response(cls, response: ApiResponse) -> ApiError:
        """
        Translate a failed transport response into an ApiError.

        Falls back to the HTTP status code when the body is not a
        service error envelope.
        """
        try:
            body = ErrorEnvelope.model_validate(response.data).error
        except ValidationError:
            logger.debug("Response body is not an error envelope: %r", response.data)
            return cls(
                message=f"Request failed with status {response.status_code}",
                code=response.status_code,
                response=response,
            )

        return cls(
            message=body.message,
            code=body.code if body.code is not None else response.status_code,
            status=body.status,
            errors=body.errors,
            response=response,
        )
