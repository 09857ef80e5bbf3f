# backend/chatline/services/friend_service.py
"""Friendship management."""

import logging
from typing import List

from sqlalchemy.orm import Session

from ..core.exceptions import ConflictException, NotFoundException, ValidationException
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class FriendService(BaseService):
    """Adds, lists and removes bidirectional friendships."""

    def __init__(self, db: Session) -> None:
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.friend_repository = RepositoryFactory.create_friend_repository(db)

    @BaseService.measure_operation("add_friend")
    def add_friend(self, user_id: str, friend_email: str) -> User:
        """
        Befriend the user registered under ``friend_email``.

        Raises:
            ValidationException: Missing email or attempting to add yourself
            NotFoundException: No user with that email
            ConflictException: Already friends
        """
        if not friend_email:
            raise ValidationException("Friend email is required", code="FRIEND_EMAIL_REQUIRED")

        friend = self.user_repository.get_by_email(friend_email)
        if friend is None:
            raise NotFoundException("User not found with provided email", code="FRIEND_NOT_FOUND")
        if friend.id == user_id:
            raise ValidationException("You cannot add yourself as a friend", code="FRIEND_SELF")
        if self.friend_repository.are_friends(user_id, friend.id):
            raise ConflictException("Already friends", code="ALREADY_FRIENDS")

        with self.transaction():
            self.friend_repository.add_friendship(user_id, friend.id)

        self.log_operation("add_friend", user_id=user_id, friend_id=friend.id)
        return friend

    @BaseService.measure_operation("get_friends")
    def get_friends(self, user_id: str) -> List[User]:
        return self.friend_repository.get_friends(user_id)

    @BaseService.measure_operation("remove_friend")
    def remove_friend(self, user_id: str, friend_id: str) -> int:
        with self.transaction():
            removed = self.friend_repository.remove_friendship(user_id, friend_id)
        self.log_operation("remove_friend", user_id=user_id, friend_id=friend_id, removed=removed)
        return removed
