# backend/chatline/realtime/protocol.py
"""
Websocket frame protocol.

Every frame, in both directions, looks like:
{
    "type": str,        # Event kind, e.g. "message:create"
    "payload": dict     # Kind-specific data
}
Error frames carry a ``message`` string instead of a payload.
"""

from dataclasses import dataclass
from enum import Enum
import json
from typing import Any, Dict, Type, Union

from pydantic import Field, ValidationError

from ..schemas._strict_base import CamelModel


class InboundEventType(str, Enum):
    """Event kinds a client may send."""

    CREATE = "message:create"
    UPDATE = "message:update"
    DELETE = "message:delete"
    READ = "message:read"


class OutboundEventType(str, Enum):
    """Frame kinds the server sends."""

    CREATED = "message:created"
    UPDATED = "message:updated"
    DELETED = "message:deleted"
    READ = "message:read"
    ERROR = "error"


INVALID_JSON_MESSAGE = "Invalid JSON format"
UNKNOWN_EVENT_MESSAGE = "Unknown event type"
DATABASE_REQUEST_ERROR_MESSAGE = "Database request error"
NOT_ALLOWED_MESSAGE = "Not allowed to modify this message"

_FAILURE_VERBS: Dict[InboundEventType, str] = {
    InboundEventType.CREATE: "create",
    InboundEventType.UPDATE: "update",
    InboundEventType.DELETE: "delete",
    InboundEventType.READ: "read",
}


def failure_message(kind: InboundEventType) -> str:
    """User-facing message for a storage or validation failure of ``kind``."""
    return f"Failed to {_FAILURE_VERBS[kind]} message"


class CreateMessagePayload(CamelModel):
    text: str
    sender_id: str = Field(..., min_length=1)
    receiver_id: str = Field(..., min_length=1)


class UpdateMessagePayload(CamelModel):
    id: str = Field(..., min_length=1)
    new_text: str


class DeleteMessagePayload(CamelModel):
    id: str = Field(..., min_length=1)


class ReadMessagesPayload(CamelModel):
    sender_id: str = Field(..., min_length=1)
    receiver_id: str = Field(..., min_length=1)


InboundPayload = Union[CreateMessagePayload, UpdateMessagePayload, DeleteMessagePayload, ReadMessagesPayload]

PAYLOAD_MODELS: Dict[InboundEventType, Type[CamelModel]] = {
    InboundEventType.CREATE: CreateMessagePayload,
    InboundEventType.UPDATE: UpdateMessagePayload,
    InboundEventType.DELETE: DeleteMessagePayload,
    InboundEventType.READ: ReadMessagesPayload,
}


class FrameError(Exception):
    """A frame was rejected before reaching any handler."""

    message = "Invalid frame"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class MalformedFrameError(FrameError):
    message = INVALID_JSON_MESSAGE


class UnknownEventError(FrameError):
    message = UNKNOWN_EVENT_MESSAGE

    def __init__(self, event_type: Any = None) -> None:
        self.event_type = event_type
        super().__init__()


class PayloadValidationError(FrameError):
    """The payload is missing a required field or has one of the wrong type."""

    def __init__(self, kind: InboundEventType, errors: list | None = None) -> None:
        self.kind = kind
        self.errors = errors or []
        super().__init__(failure_message(kind))


@dataclass(frozen=True)
class InboundEvent:
    kind: InboundEventType
    payload: Dict[str, Any]


def decode_frame(raw: Union[str, bytes]) -> InboundEvent:
    """
    Parse one inbound frame.

    Raises:
        MalformedFrameError: If the frame is not valid JSON
        UnknownEventError: If the frame is not an object or its type is not a known kind
    """
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise MalformedFrameError() from e

    if not isinstance(data, dict):
        raise UnknownEventError()

    event_type = data.get("type")
    try:
        kind = InboundEventType(event_type)
    except ValueError as e:
        raise UnknownEventError(event_type) from e

    payload = data.get("payload")
    return InboundEvent(kind=kind, payload=payload if isinstance(payload, dict) else {})


def parse_payload(kind: InboundEventType, payload: Dict[str, Any]) -> InboundPayload:
    """Validate ``payload`` against the model for ``kind``."""
    try:
        return PAYLOAD_MODELS[kind].model_validate(payload)  # type: ignore[return-value]
    except ValidationError as e:
        raise PayloadValidationError(kind, e.errors(include_url=False)) from e


def build_frame(kind: OutboundEventType, payload: Dict[str, Any]) -> Dict[str, Any]:
    return {"type": kind.value, "payload": payload}


def error_frame(message: str) -> Dict[str, Any]:
    return {"type": OutboundEventType.ERROR.value, "message": message}
