# backend/chatline/services/message_service.py
"""
Message Service for direct messaging.

Business logic for creating, editing, deleting and reading messages. Used
both by the HTTP message endpoints and, through the realtime gateway, by
the websocket event handlers.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from ..models.message import Message
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class MessageService(BaseService):
    """Service layer for direct messages."""

    def __init__(self, db: Session, message_repository=None) -> None:
        super().__init__(db)
        self.repository = message_repository or RepositoryFactory.create_message_repository(db)

    @BaseService.measure_operation("create_message")
    def create_message(self, text: str, sender_id: str, receiver_id: str) -> Message:
        with self.transaction():
            message = self.repository.create_message(text=text, sender_id=sender_id, receiver_id=receiver_id)
        self.log_operation("create_message", message_id=message.id, sender_id=sender_id, receiver_id=receiver_id)
        return message

    @BaseService.measure_operation("update_message_text")
    def update_message_text(self, message_id: str, new_text: str) -> Message:
        with self.transaction():
            message = self.repository.update_message_text(message_id, new_text)
        self.log_operation("update_message_text", message_id=message_id)
        return message

    @BaseService.measure_operation("delete_message")
    def delete_message(self, message_id: str) -> Message:
        """Delete a message, returning the record captured before deletion."""
        with self.transaction():
            message = self.repository.delete_message(message_id)
        self.log_operation("delete_message", message_id=message_id)
        return message

    @BaseService.measure_operation("mark_read")
    def mark_read(self, sender_id: str, receiver_id: str) -> int:
        """
        Mark every unread message from ``sender_id`` to ``receiver_id`` as read.

        Returns:
            Number of messages whose read flag changed
        """
        with self.transaction():
            count = self.repository.mark_messages_as_read(sender_id, receiver_id)
        self.log_operation("mark_read", sender_id=sender_id, receiver_id=receiver_id, count=count)
        return count

    def get_message(self, message_id: str) -> Optional[Message]:
        return self.repository.get_by_id(message_id)

    @BaseService.measure_operation("get_conversation")
    def get_conversation(self, user_id: str, peer_id: str, limit: Optional[int] = None) -> List[Message]:
        return self.repository.get_conversation(user_id, peer_id, limit=limit)

    @BaseService.measure_operation("get_unread_count")
    def get_unread_count(self, user_id: str) -> int:
        return self.repository.get_unread_count_for_user(user_id)

    @BaseService.measure_operation("get_recent_chats")
    def get_recent_chats(self, user_id: str) -> List[Dict[str, object]]:
        """
        Latest message per peer, newest first, each with the unread count
        the peer has sent to ``user_id``.
        """
        unread_by_sender = self.repository.get_unread_counts_by_sender(user_id)
        chats = []
        for message in self.repository.get_latest_message_per_peer(user_id):
            peer_id = message.receiver_id if message.sender_id == user_id else message.sender_id
            chats.append(
                {
                    "peer_id": peer_id,
                    "last_message": message,
                    "unread_count": unread_by_sender.get(peer_id, 0),
                }
            )
        return chats
