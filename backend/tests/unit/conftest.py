from datetime import datetime, timezone
import itertools
from typing import Any, Dict, List, Optional

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session
from sqlalchemy.pool import StaticPool

from chatline.core.exceptions import RepositoryException
from chatline.database import Base
from chatline.realtime.registry import ConnectionRegistry
from chatline.schemas.message import MessageResponse

# Import models so Base.metadata is populated for create_all.
import chatline.models  # noqa: F401


@pytest.fixture(scope="session")
def _unit_engine():
    engine = create_engine(
        "sqlite+pysqlite:///:memory:",
        future=True,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    # pysqlite manages transactions itself and breaks SAVEPOINT; hand control to SQLAlchemy
    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def unit_db(_unit_engine) -> Session:
    """
    Provide a session joined to an outer transaction that is rolled back.

    Service commits only release a SAVEPOINT, so nothing outlives the test.
    """
    connection = _unit_engine.connect()
    transaction = connection.begin()
    session = Session(bind=connection, expire_on_commit=False, join_transaction_mode="create_savepoint")

    try:
        yield session
    finally:
        session.close()
        transaction.rollback()
        connection.close()


class FakeConnection:
    """In-memory stand-in for a websocket connection."""

    def __init__(self, name: str = "conn", *, open: bool = True, fail_on_send: bool = False) -> None:
        self.name = name
        self.open = open
        self.fail_on_send = fail_on_send
        self.sent: List[Dict[str, Any]] = []
        self.closed_with: Optional[int] = None

    @property
    def is_open(self) -> bool:
        return self.open

    async def send_json(self, data: Dict[str, Any]) -> None:
        if self.fail_on_send:
            raise RuntimeError("Cannot call send once a close message has been sent")
        self.sent.append(data)

    async def close(self, code: int, reason: str = "") -> None:
        self.open = False
        self.closed_with = code

    def __repr__(self) -> str:
        return f"FakeConnection({self.name})"


class FakeGateway:
    """
    Dict-backed message store implementing the gateway contract.

    Set ``fail_with`` to make every write raise that exception.
    """

    def __init__(self) -> None:
        self.messages: Dict[str, MessageResponse] = {}
        self.calls: List[str] = []
        self.fail_with: Optional[Exception] = None
        self._ids = itertools.count(1)

    def _check_failure(self, operation: str) -> None:
        self.calls.append(operation)
        if self.fail_with is not None:
            raise self.fail_with

    def add(self, text: str, sender_id: str, receiver_id: str, is_read: bool = False) -> MessageResponse:
        message = MessageResponse(
            id=f"msg-{next(self._ids)}",
            text=text,
            sender_id=sender_id,
            receiver_id=receiver_id,
            is_read=is_read,
            created_at=datetime.now(timezone.utc),
        )
        self.messages[message.id] = message
        return message

    async def create_message(self, text: str, sender_id: str, receiver_id: str) -> MessageResponse:
        self._check_failure("create_message")
        return self.add(text, sender_id, receiver_id)

    async def update_message_text(self, message_id: str, new_text: str) -> MessageResponse:
        self._check_failure("update_message_text")
        if message_id not in self.messages:
            raise RepositoryException(f"Message {message_id} not found")
        updated = self.messages[message_id].model_copy(update={"text": new_text})
        self.messages[message_id] = updated
        return updated

    async def delete_message(self, message_id: str) -> MessageResponse:
        self._check_failure("delete_message")
        if message_id not in self.messages:
            raise RepositoryException(f"Message {message_id} not found")
        return self.messages.pop(message_id)

    async def mark_read(self, sender_id: str, receiver_id: str) -> int:
        self._check_failure("mark_read")
        count = 0
        for message_id, message in list(self.messages.items()):
            if message.sender_id == sender_id and message.receiver_id == receiver_id and not message.is_read:
                self.messages[message_id] = message.model_copy(update={"is_read": True})
                count += 1
        return count

    async def get_message(self, message_id: str) -> Optional[MessageResponse]:
        self.calls.append("get_message")
        return self.messages.get(message_id)


@pytest.fixture
def registry() -> ConnectionRegistry:
    return ConnectionRegistry()


@pytest.fixture
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def make_connection():
    def _make(name: str = "conn", **kwargs: Any) -> FakeConnection:
        return FakeConnection(name, **kwargs)

    return _make
