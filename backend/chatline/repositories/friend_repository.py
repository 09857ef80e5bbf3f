# backend/chatline/repositories/friend_repository.py
"""
Friend Repository.

Friendships are stored as two directed rows; every write here touches
both directions so the pair never drifts out of sync.
"""

import logging
from typing import List

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..models.friend import Friend
from ..models.user import User
from .base_repository import BaseRepository, translate_db_error

logger = logging.getLogger(__name__)


class FriendRepository(BaseRepository[Friend]):
    """Repository for friendship edges."""

    def __init__(self, db: Session):
        super().__init__(db, Friend)

    def are_friends(self, user_id: str, friend_id: str) -> bool:
        return self.exists(user_id=user_id, friend_id=friend_id)

    def add_friendship(self, user_id: str, friend_id: str) -> List[Friend]:
        """Create both directed edges of a friendship."""
        return self.bulk_create(
            [
                {"user_id": user_id, "friend_id": friend_id},
                {"user_id": friend_id, "friend_id": user_id},
            ]
        )

    def remove_friendship(self, user_id: str, friend_id: str) -> int:
        """Delete both directed edges. Returns the number of rows removed."""
        try:
            count = (
                self.db.query(Friend)
                .filter(
                    or_(
                        and_(Friend.user_id == user_id, Friend.friend_id == friend_id),
                        and_(Friend.user_id == friend_id, Friend.friend_id == user_id),
                    )
                )
                .delete(synchronize_session=False)
            )
            self.db.flush()
            return int(count)
        except SQLAlchemyError as e:
            self.logger.error(f"Error removing friendship {user_id}<->{friend_id}: {str(e)}")
            self.db.rollback()
            raise translate_db_error(e, "remove friendship") from e

    def get_friends(self, user_id: str) -> List[User]:
        """Return the users ``user_id`` is friends with."""
        try:
            edges = (
                self.db.query(Friend)
                .options(joinedload(Friend.friend))
                .filter(Friend.user_id == user_id)
                .order_by(Friend.created_at)
                .all()
            )
            return [edge.friend for edge in edges]
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching friends for {user_id}: {str(e)}")
            raise translate_db_error(e, "fetch friends") from e
