"""Message value decoded from a pull response."""

from __future__ import annotations

import base64
import binascii
from dataclasses import dataclass, field
from datetime import datetime
from types import MappingProxyType
from typing import Any, Mapping, Optional, Union

from gpubsub.errors import MessageDecodeError
from gpubsub.models.response import WireMessage


@dataclass(frozen=True)
class Message:
    """
    One unit of data delivered by the service.

    Instances are built by ``from_wire_record`` while decoding a pull
    response and are immutable afterwards.
    """

    data: bytes = b""
    attributes: Mapping[str, str] = field(default_factory=dict)
    message_id: str = ""
    publish_time: Optional[datetime] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def __hash__(self) -> int:
        return hash((self.data, self.message_id))

    @classmethod
    def from_wire_record(cls, record: Union[WireMessage, Mapping[str, Any], None]) -> Message:
        """
        Decode the ``message`` part of a received record.

        Absent fields default to empty values, since the service omits
        empty fields. Raises MessageDecodeError for a payload that is not
        valid base64.
        """
        if not isinstance(record, WireMessage):
            record = WireMessage.model_validate(record or {})

        try:
            data = base64.b64decode(record.data.strip(), validate=True)
        except (binascii.Error, ValueError) as e:
            raise MessageDecodeError(
                f"Message {record.message_id or '<unknown>'} has a malformed payload: {e}"
            ) from e

        return cls(
            data=data,
            attributes=record.attributes,
            message_id=record.message_id,
            publish_time=record.publish_time,
        )

    def to_wire_record(self) -> dict[str, Any]:
        """Encode back to the wire shape accepted by ``from_wire_record``."""
        record: dict[str, Any] = {
            "data": base64.b64encode(self.data).decode("ascii"),
            "attributes": dict(self.attributes),
            "messageId": self.message_id,
        }
        if self.publish_time is not None:
            record["publishTime"] = self.publish_time.isoformat()
        return record

    def text(self, encoding: str = "utf-8") -> str:
        """Payload decoded as text."""
        return self.data.decode(encoding)
