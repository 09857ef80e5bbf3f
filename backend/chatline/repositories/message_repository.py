# backend/chatline/repositories/message_repository.py
"""
Message Repository for direct messaging.

Implements every data access operation the live message path and the
HTTP message endpoints need.
"""

import logging
from typing import Dict, List, Optional

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.message import Message
from .base_repository import BaseRepository, translate_db_error

logger = logging.getLogger(__name__)


class MessageRepository(BaseRepository[Message]):
    """
    Repository for message data access.

    Handles all database operations for direct messages, including the
    bulk read-receipt update.
    """

    def __init__(self, db: Session):
        """Initialize with Message model."""
        super().__init__(db, Message)

    def create_message(self, text: str, sender_id: str, receiver_id: str) -> Message:
        """Insert a new unread message."""
        return self.create(text=text, sender_id=sender_id, receiver_id=receiver_id, is_read=False)

    def update_message_text(self, message_id: str, new_text: str) -> Message:
        """
        Replace the text of a message.

        Raises:
            RepositoryException: If the message does not exist
        """
        message = self.update(message_id, text=new_text)
        if message is None:
            raise RepositoryException(f"Message {message_id} not found")
        return message

    def delete_message(self, message_id: str) -> Message:
        """
        Delete a message and return the record as it was before deletion.

        Raises:
            RepositoryException: If the message does not exist
        """
        try:
            message = self.get_by_id(message_id)
            if message is None:
                raise RepositoryException(f"Message {message_id} not found")
            self.db.delete(message)
            self.db.flush()
            return message
        except SQLAlchemyError as e:
            self.logger.error(f"Error deleting message {message_id}: {str(e)}")
            self.db.rollback()
            raise translate_db_error(e, "delete message") from e

    def mark_messages_as_read(self, sender_id: str, receiver_id: str) -> int:
        """
        Flip ``is_read`` on every unread message from sender to receiver.

        Returns:
            Number of messages marked as read
        """
        try:
            count = (
                self.db.query(Message)
                .filter(
                    and_(
                        Message.sender_id == sender_id,
                        Message.receiver_id == receiver_id,
                        Message.is_read == False,  # noqa: E712
                    )
                )
                .update({Message.is_read: True}, synchronize_session=False)
            )
            self.db.flush()
            self.logger.info(f"Marked {count} messages from {sender_id} to {receiver_id} as read")
            return int(count)
        except SQLAlchemyError as e:
            self.logger.error(f"Error marking messages as read: {str(e)}")
            self.db.rollback()
            raise translate_db_error(e, "mark messages as read") from e

    def get_conversation(self, user_id: str, peer_id: str, limit: Optional[int] = None) -> List[Message]:
        """Messages exchanged between two users in both directions, oldest first."""
        try:
            query = (
                self.db.query(Message)
                .filter(
                    or_(
                        and_(Message.sender_id == user_id, Message.receiver_id == peer_id),
                        and_(Message.sender_id == peer_id, Message.receiver_id == user_id),
                    )
                )
                .order_by(Message.created_at, Message.id)
            )
            if limit is not None:
                query = query.limit(limit)
            return query.all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching conversation {user_id}<->{peer_id}: {str(e)}")
            raise translate_db_error(e, "fetch conversation") from e

    def get_unread_count_for_user(self, user_id: str) -> int:
        """Total unread messages addressed to ``user_id``."""
        try:
            return (
                self.db.query(func.count(Message.id))
                .filter(and_(Message.receiver_id == user_id, Message.is_read == False))  # noqa: E712
                .scalar()
            ) or 0
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting unread messages: {str(e)}")
            raise translate_db_error(e, "count unread messages") from e

    def get_unread_counts_by_sender(self, user_id: str) -> Dict[str, int]:
        """Unread messages addressed to ``user_id`` grouped by sender."""
        try:
            rows = (
                self.db.query(Message.sender_id, func.count(Message.id))
                .filter(and_(Message.receiver_id == user_id, Message.is_read == False))  # noqa: E712
                .group_by(Message.sender_id)
                .all()
            )
            return {sender_id: int(count) for sender_id, count in rows}
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting unread messages by sender: {str(e)}")
            raise translate_db_error(e, "count unread messages") from e

    def get_latest_message_per_peer(self, user_id: str) -> List[Message]:
        """Most recent message with each peer ``user_id`` has talked to, newest first."""
        try:
            messages = (
                self.db.query(Message)
                .filter(or_(Message.sender_id == user_id, Message.receiver_id == user_id))
                .order_by(Message.created_at.desc(), Message.id.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching recent chats for {user_id}: {str(e)}")
            raise translate_db_error(e, "fetch recent chats") from e

        latest: Dict[str, Message] = {}
        for message in messages:
            peer_id = message.receiver_id if message.sender_id == user_id else message.sender_id
            latest.setdefault(peer_id, message)
        return list(latest.values())
