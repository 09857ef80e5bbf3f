# backend/chatline/repositories/factory.py
"""
Repository Factory for the Chatline backend

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session


# Avoid circular imports
if TYPE_CHECKING:
    from .friend_repository import FriendRepository
    from .message_repository import MessageRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation to ensure consistent initialization
    and makes it easy to swap implementations if needed.
    """

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        """Create repository for user operations."""
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_friend_repository(db: Session) -> "FriendRepository":
        """Create repository for friendship operations."""
        from .friend_repository import FriendRepository

        return FriendRepository(db)

    @staticmethod
    def create_message_repository(db: Session) -> "MessageRepository":
        """Create repository for message operations."""
        from .message_repository import MessageRepository

        return MessageRepository(db)
