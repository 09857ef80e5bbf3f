# backend/chatline/database.py
"""
Database engine, session factory, and metadata shared across the application.
"""

from datetime import datetime
import logging
from typing import Any, Generator

from fastapi import Request
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeMeta, Session, declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .core.config import settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str) -> Engine:
    """Create an engine for ``database_url`` with the connect hooks installed."""
    if database_url.startswith("sqlite"):
        kwargs: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url:
            # One shared connection, otherwise every session sees an empty database
            kwargs["poolclass"] = StaticPool
        new_engine = create_engine(database_url, **kwargs)
    else:
        new_engine = create_engine(
            database_url,
            pool_size=10,  # Number of persistent connections
            max_overflow=10,  # Maximum overflow connections
            pool_timeout=30,  # Timeout for getting connection
            pool_recycle=1800,  # Recycle connections after 30 minutes
            pool_pre_ping=True,  # Test connections before using
            connect_args={"application_name": "chatline_backend"},
        )

    event.listen(new_engine, "connect", receive_connect)
    if new_engine.dialect.name == "sqlite":
        event.listen(new_engine, "connect", enable_sqlite_foreign_keys)
    return new_engine


def receive_connect(dbapi_connection: Any, connection_record: Any) -> None:
    connection_record.info["connect_time"] = datetime.now()
    logger.debug("Database connection established")


def enable_sqlite_foreign_keys(dbapi_connection: Any, connection_record: Any) -> None:
    # SQLite ignores FOREIGN KEY clauses unless enabled on each connection
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(bind: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=bind, expire_on_commit=False)


engine: Engine = build_engine(settings.database_url)

SessionLocal = create_session_factory(engine)


Base: DeclarativeMeta = declarative_base()


def get_db(request: Request) -> Generator[Session, None, None]:
    """FastAPI dependency - session committed on success, rolled back on error."""
    session_factory = getattr(request.app.state, "session_factory", SessionLocal)
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    """Create all tables registered on Base.metadata."""
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
    logger.info("Database tables ensured")
