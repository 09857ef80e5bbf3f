# backend/chatline/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected.
"""

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ...database import get_db
from ...realtime.registry import ConnectionRegistry
from ...services.auth_service import AuthService
from ...services.friend_service import FriendService
from ...services.message_service import MessageService


def get_auth_service(db: Session = Depends(get_db)) -> AuthService:
    return AuthService(db)


def get_friend_service(db: Session = Depends(get_db)) -> FriendService:
    return FriendService(db)


def get_message_service(db: Session = Depends(get_db)) -> MessageService:
    return MessageService(db)


def get_connection_registry(request: Request) -> ConnectionRegistry:
    """The application's live connection registry."""
    registry: ConnectionRegistry = request.app.state.connection_registry
    return registry
