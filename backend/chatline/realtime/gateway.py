# backend/chatline/realtime/gateway.py
"""
Persistence gateway used by the websocket event handlers.

Handlers only see this async contract. The SQL implementation runs each
call through ``MessageService`` on a worker thread with its own short-lived
session, so a slow database never blocks the event loop.
"""

import asyncio
import logging
from typing import Callable, Optional, Protocol, TypeVar

from sqlalchemy.orm import Session

from ..database import SessionLocal
from ..schemas.message import MessageResponse
from ..services.message_service import MessageService

logger = logging.getLogger(__name__)

T = TypeVar("T")


class MessageGateway(Protocol):
    """
    Message storage operations available to the live path.

    Every method may raise ``RepositoryException``; ``DatabaseRequestError``
    marks a request the database rejected in an unclassified way.
    """

    async def create_message(self, text: str, sender_id: str, receiver_id: str) -> MessageResponse:
        ...

    async def update_message_text(self, message_id: str, new_text: str) -> MessageResponse:
        ...

    async def delete_message(self, message_id: str) -> MessageResponse:
        ...

    async def mark_read(self, sender_id: str, receiver_id: str) -> int:
        ...

    async def get_message(self, message_id: str) -> Optional[MessageResponse]:
        ...


class SqlMessageGateway:
    """``MessageGateway`` backed by SQLAlchemy."""

    def __init__(self, session_factory: Callable[[], Session] = SessionLocal) -> None:
        self.session_factory = session_factory

    def _run(self, operation: Callable[[MessageService], T]) -> T:
        """
        Run ``operation`` with a fresh session.

        NOTE: This is a sync function - must be called via asyncio.to_thread()
        from async context to avoid blocking the event loop.
        """
        db = self.session_factory()
        try:
            return operation(MessageService(db))
        finally:
            db.close()

    async def _call(self, operation: Callable[[MessageService], T]) -> T:
        return await asyncio.to_thread(self._run, operation)

    async def create_message(self, text: str, sender_id: str, receiver_id: str) -> MessageResponse:
        return await self._call(
            lambda service: MessageResponse.model_validate(service.create_message(text, sender_id, receiver_id))
        )

    async def update_message_text(self, message_id: str, new_text: str) -> MessageResponse:
        return await self._call(
            lambda service: MessageResponse.model_validate(service.update_message_text(message_id, new_text))
        )

    async def delete_message(self, message_id: str) -> MessageResponse:
        return await self._call(lambda service: MessageResponse.model_validate(service.delete_message(message_id)))

    async def mark_read(self, sender_id: str, receiver_id: str) -> int:
        return await self._call(lambda service: service.mark_read(sender_id, receiver_id))

    async def get_message(self, message_id: str) -> Optional[MessageResponse]:
        def _get(service: MessageService) -> Optional[MessageResponse]:
            message = service.get_message(message_id)
            return MessageResponse.model_validate(message) if message is not None else None

        return await self._call(_get)
