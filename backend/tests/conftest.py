# backend/tests/conftest.py
"""
Pytest configuration shared by unit and integration tests.

The test environment is set up BEFORE any chatline imports so settings,
the engine and the bcrypt context all pick up the test values.
"""

import os
import sys

# CRITICAL: Set test configuration BEFORE any chatline imports!
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["REFRESH_SECRET_KEY"] = "test-refresh-secret-key"
os.environ["CI"] = "true"

# Add the backend directory to Python path so imports work
backend_dir = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, backend_dir)

from typing import Callable, Iterator  # noqa: E402

from fastapi import FastAPI  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
import pytest  # noqa: E402
from sqlalchemy.orm import Session  # noqa: E402

from chatline.auth import create_access_token, get_password_hash  # noqa: E402
from chatline.core.config import settings  # noqa: E402
from chatline.database import Base, SessionLocal, engine  # noqa: E402
from chatline.main import create_app  # noqa: E402
import chatline.models  # noqa: E402,F401
from chatline.models.user import User  # noqa: E402

TEST_PASSWORD = "Test1234"


@pytest.fixture(autouse=True)
def _fresh_tables() -> Iterator[None]:
    """Every test starts with empty tables on the shared in-memory engine."""
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db() -> Iterator[Session]:
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def create_user(db: Session) -> Callable[..., User]:
    """Factory creating committed users with ``TEST_PASSWORD``."""

    def _create(name: str = "Test User", email: str = "user@example.com") -> User:
        user = User(name=name, email=email, hashed_password=get_password_hash(TEST_PASSWORD))
        db.add(user)
        db.commit()
        return user

    return _create


@pytest.fixture
def auth_headers_for() -> Callable[[User], dict]:
    def _headers(user: User) -> dict:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _headers


@pytest.fixture
def app() -> FastAPI:
    return create_app(settings)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client
