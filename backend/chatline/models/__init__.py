"""SQLAlchemy models. Importing this package registers every table on Base.metadata."""

from .friend import Friend
from .message import Message
from .user import User

__all__ = ["Friend", "Message", "User"]
