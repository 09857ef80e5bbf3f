# backend/chatline/models/user.py
"""
User model for the Chatline backend.

Users authenticate with email and password, hold friendships with other
users and send direct messages to each other.

Classes:
    User: Main user model for authentication and profile data
"""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String
import ulid

from ..database import Base


class User(Base):
    """
    Main user model for authentication and profile management.

    Attributes:
        id: ULID primary key
        name: Display name
        email: Unique email address used for login
        hashed_password: Bcrypt hashed password
        refresh_token: Currently valid refresh token (cleared on logout)
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    refresh_token = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return f"<User {self.email}>"
