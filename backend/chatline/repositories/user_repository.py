# backend/chatline/repositories/user_repository.py
"""User data access."""

import logging
from typing import List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository, translate_db_error

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    """Repository for user lookups and credential bookkeeping."""

    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        return self.find_one_by(email=email)

    def list_users(self) -> List[User]:
        try:
            return self.db.query(User).order_by(User.created_at).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing users: {str(e)}")
            raise translate_db_error(e, "list users") from e

    def set_refresh_token(self, user_id: str, refresh_token: Optional[str]) -> Optional[User]:
        return self.update(user_id, refresh_token=refresh_token)
