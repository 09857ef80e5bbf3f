# backend/chatline/realtime/handlers.py
"""
Websocket event handlers.

Each inbound kind maps to one handler that performs a single persistence
operation through the ``MessageGateway`` and returns the outbound frame
plus the identities that should receive it. Handlers never send anything
themselves; delivery happens in the dispatcher after the write succeeded.
"""

from dataclasses import dataclass
import logging
from typing import Any, Awaitable, Callable, Dict, FrozenSet

from ..core.exceptions import ForbiddenException
from ..schemas.message import MessageResponse
from .gateway import MessageGateway
from .protocol import (
    NOT_ALLOWED_MESSAGE,
    CreateMessagePayload,
    DeleteMessagePayload,
    InboundEventType,
    OutboundEventType,
    ReadMessagesPayload,
    UpdateMessagePayload,
    build_frame,
    parse_payload,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandlerResult:
    frame: Dict[str, Any]
    recipients: FrozenSet[str]


def _message_result(kind: OutboundEventType, message: MessageResponse) -> HandlerResult:
    return HandlerResult(
        frame=build_frame(kind, message.to_wire()),
        recipients=frozenset({message.sender_id, message.receiver_id}),
    )


class EventHandlers:
    """
    Handlers for every ``InboundEventType``.

    With ``enforce_sender_identity`` off, sender and receiver ids are taken
    from the payload as sent. With it on, the acting identity of the
    connection is bound into every operation.
    """

    def __init__(self, gateway: MessageGateway, *, enforce_sender_identity: bool = False) -> None:
        self.gateway = gateway
        self.enforce_sender_identity = enforce_sender_identity
        self._handlers: Dict[InboundEventType, Callable[[Any, str], Awaitable[HandlerResult]]] = {
            InboundEventType.CREATE: self.create_message,
            InboundEventType.UPDATE: self.update_message,
            InboundEventType.DELETE: self.delete_message,
            InboundEventType.READ: self.mark_read,
        }
        missing = set(InboundEventType) - set(self._handlers)
        if missing:
            raise RuntimeError(f"No handler registered for {sorted(k.value for k in missing)}")

    async def handle(self, kind: InboundEventType, payload: Dict[str, Any], actor: str) -> HandlerResult:
        """
        Validate ``payload`` for ``kind`` and run its handler.

        Raises:
            PayloadValidationError: Payload is missing or has invalid fields
            ForbiddenException: Actor may not perform this operation
            RepositoryException: Storage failed
        """
        parsed = parse_payload(kind, payload)
        return await self._handlers[kind](parsed, actor)

    async def create_message(self, payload: CreateMessagePayload, actor: str) -> HandlerResult:
        sender_id = payload.sender_id
        if self.enforce_sender_identity and sender_id != actor:
            logger.warning(
                f"[WS] Overriding senderId {sender_id} with authenticated user {actor}",
                extra={"user_id": actor},
            )
            sender_id = actor

        message = await self.gateway.create_message(payload.text, sender_id, payload.receiver_id)
        return _message_result(OutboundEventType.CREATED, message)

    async def update_message(self, payload: UpdateMessagePayload, actor: str) -> HandlerResult:
        if self.enforce_sender_identity:
            await self._require_participant(payload.id, actor)
        message = await self.gateway.update_message_text(payload.id, payload.new_text)
        return _message_result(OutboundEventType.UPDATED, message)

    async def delete_message(self, payload: DeleteMessagePayload, actor: str) -> HandlerResult:
        if self.enforce_sender_identity:
            await self._require_participant(payload.id, actor)
        # Recipients come from the record captured before deletion
        message = await self.gateway.delete_message(payload.id)
        return _message_result(OutboundEventType.DELETED, message)

    async def mark_read(self, payload: ReadMessagesPayload, actor: str) -> HandlerResult:
        if self.enforce_sender_identity and payload.receiver_id != actor:
            raise ForbiddenException(NOT_ALLOWED_MESSAGE, code="NOT_RECEIVER")

        count = await self.gateway.mark_read(payload.sender_id, payload.receiver_id)
        logger.debug(f"[WS] Marked {count} messages from {payload.sender_id} to {payload.receiver_id} as read")
        return HandlerResult(
            frame=build_frame(
                OutboundEventType.READ,
                {"senderId": payload.sender_id, "receiverId": payload.receiver_id},
            ),
            recipients=frozenset({payload.sender_id, payload.receiver_id}),
        )

    async def _require_participant(self, message_id: str, actor: str) -> None:
        # A missing message falls through so the write reports the storage failure
        message = await self.gateway.get_message(message_id)
        if message is not None and actor not in (message.sender_id, message.receiver_id):
            raise ForbiddenException(NOT_ALLOWED_MESSAGE, code="NOT_PARTICIPANT")
