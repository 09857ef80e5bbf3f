from .base_repository import BaseRepository
from .factory import RepositoryFactory
from .friend_repository import FriendRepository
from .message_repository import MessageRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "FriendRepository",
    "MessageRepository",
    "RepositoryFactory",
    "UserRepository",
]
