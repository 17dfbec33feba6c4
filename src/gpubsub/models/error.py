"""Models for the service error envelope."""

from typing import Optional

from pydantic import Field

from gpubsub.models.base import CamelCaseModel


class ErrorItem(CamelCaseModel):
    """One entry of the envelope's ``errors`` list."""

    message: Optional[str] = None
    domain: Optional[str] = None
    reason: Optional[str] = None  # e.g. alreadyExists, notFound


class ErrorBody(CamelCaseModel):
    """Structured error returned by the service."""

    code: Optional[int] = None
    message: str = ""
    status: Optional[str] = None  # e.g. ALREADY_EXISTS, NOT_FOUND
    errors: list[ErrorItem] = Field(default_factory=list)


class ErrorEnvelope(CamelCaseModel):
    """Top-level ``{"error": {...}}`` wrapper."""

    error: ErrorBody
