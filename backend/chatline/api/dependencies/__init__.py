# backend/chatline/api/dependencies/__init__.py
"""
Central export point for all dependencies.

This module re-exports all dependencies from submodules
for convenient access throughout the application.
"""

from ...database import get_db
from .auth import get_current_user_id, get_token_service
from .services import get_auth_service, get_connection_registry, get_friend_service, get_message_service

__all__ = [
    # Auth
    "get_current_user_id",
    "get_token_service",
    # Database
    "get_db",
    # Services
    "get_auth_service",
    "get_connection_registry",
    "get_friend_service",
    "get_message_service",
]
