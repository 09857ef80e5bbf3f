# backend/chatline/services/auth_service.py
"""
Authentication Service for the Chatline backend

Handles user registration, authentication, token refresh and user
retrieval. Follows the service layer pattern to keep business logic
out of routes.
"""

import logging
from typing import List, Tuple

from jwt import PyJWTError
from sqlalchemy.orm import Session

from ..auth import (
    DUMMY_HASH_FOR_TIMING_ATTACK,
    create_access_token,
    create_refresh_token,
    decode_refresh_token,
    get_password_hash,
    identity_from_claims,
    verify_password,
)
from ..core.exceptions import (
    ConflictException,
    NotFoundException,
    UnauthorizedException,
    ValidationException,
)
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class AuthService(BaseService):
    """Service for handling authentication operations."""

    def __init__(self, db: Session, user_repository=None) -> None:
        super().__init__(db)
        self.user_repository = user_repository or RepositoryFactory.create_user_repository(db)

    @BaseService.measure_operation("register_user")
    def register_user(self, name: str, email: str, password: str) -> User:
        """
        Register a new user.

        Raises:
            ValidationException: If any field is empty
            ConflictException: If email already exists
        """
        if not name or not email or not password:
            raise ValidationException("Fields are Missing", code="FIELDS_MISSING")

        self.log_operation("register_user", email=email)

        if self.user_repository.get_by_email(email):
            self.logger.warning(f"Registration failed - email already exists: {email}")
            raise ConflictException("User is already Registered", code="USER_EXISTS")

        hashed_password = get_password_hash(password)
        with self.transaction():
            user = self.user_repository.create(name=name, email=email, hashed_password=hashed_password)

        self.logger.info(f"Registered user {user.id}")
        return user

    @BaseService.measure_operation("login")
    def login(self, email: str, password: str) -> Tuple[User, str, str]:
        """
        Verify credentials and issue an access/refresh token pair.

        Returns:
            (user, access_token, refresh_token)

        Raises:
            ValidationException: If email or password is empty
            NotFoundException: If no user has this email
            UnauthorizedException: If the password is wrong
        """
        if not email or not password:
            raise ValidationException("Fields are missing", code="FIELDS_MISSING")

        user = self.user_repository.get_by_email(email)
        if user is None:
            # Same bcrypt cost as a real check so response time doesn't reveal which emails exist
            verify_password(password, DUMMY_HASH_FOR_TIMING_ATTACK)
            raise NotFoundException("User not found with this email", code="USER_NOT_FOUND")

        if not verify_password(password, user.hashed_password):
            raise UnauthorizedException("Incorrect Password", code="INCORRECT_PASSWORD")

        access_token = create_access_token(user.id)
        refresh_token = create_refresh_token(user.id)
        with self.transaction():
            self.user_repository.set_refresh_token(user.id, refresh_token)

        self.log_operation("login", user_id=user.id)
        return user, access_token, refresh_token

    @BaseService.measure_operation("refresh_access_token")
    def refresh_access_token(self, refresh_token: str) -> str:
        """
        Exchange a refresh token for a new access token.

        The refresh token must verify and must match the one stored on the
        user, so logging out invalidates it.
        """
        invalid = UnauthorizedException("Invalid or expired refresh token", code="REFRESH_INVALID")
        if not refresh_token:
            raise invalid
        try:
            payload = decode_refresh_token(refresh_token)
        except PyJWTError as e:
            raise invalid from e

        identity = identity_from_claims(payload)
        user = self.user_repository.get_by_id(identity) if identity else None
        if user is None or user.refresh_token != refresh_token:
            raise invalid
        return create_access_token(user.id)

    @BaseService.measure_operation("logout")
    def logout(self, user_id: str) -> None:
        with self.transaction():
            self.user_repository.set_refresh_token(user_id, None)
        self.log_operation("logout", user_id=user_id)

    @BaseService.measure_operation("list_users")
    def list_users(self) -> List[User]:
        return self.user_repository.list_users()
