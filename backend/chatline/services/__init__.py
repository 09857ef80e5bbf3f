"""
Service layer for the Chatline backend.

Services hold the business logic and own transaction boundaries; routes
and the realtime gateway call into them.
"""

from .auth_service import AuthService
from .base import BaseService
from .friend_service import FriendService
from .message_service import MessageService

__all__ = [
    "AuthService",
    "BaseService",
    "FriendService",
    "MessageService",
]
