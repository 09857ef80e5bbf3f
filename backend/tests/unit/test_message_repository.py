from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError

from chatline.core.exceptions import DatabaseRequestError, RepositoryException
from chatline.models.message import Message
from chatline.models.user import User
from chatline.repositories.base_repository import translate_db_error
from chatline.repositories.message_repository import MessageRepository


@pytest.fixture
def users(unit_db):
    alice = User(name="Alice", email="alice@example.com", hashed_password="x")
    bob = User(name="Bob", email="bob@example.com", hashed_password="x")
    carol = User(name="Carol", email="carol@example.com", hashed_password="x")
    unit_db.add_all([alice, bob, carol])
    unit_db.flush()
    return alice, bob, carol


@pytest.fixture
def repo(unit_db):
    return MessageRepository(unit_db)


def _message(unit_db, sender, receiver, text, *, is_read=False, minutes_ago=0):
    message = Message(
        text=text,
        sender_id=sender.id,
        receiver_id=receiver.id,
        is_read=is_read,
        created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
    )
    unit_db.add(message)
    unit_db.flush()
    return message


def test_mark_read_flips_only_unread_messages_in_that_direction(unit_db, repo, users):
    alice, bob, _ = users
    unread = [_message(unit_db, alice, bob, f"m{i}") for i in range(3)]
    _message(unit_db, alice, bob, "old", is_read=True)
    reverse = _message(unit_db, bob, alice, "reply")

    count = repo.mark_messages_as_read(alice.id, bob.id)

    assert count == 3
    unit_db.expire_all()
    assert all(repo.get_by_id(m.id).is_read for m in unread)
    assert repo.get_by_id(reverse.id).is_read is False
    assert repo.mark_messages_as_read(alice.id, bob.id) == 0


def test_create_message_starts_unread(repo, users):
    alice, bob, _ = users

    message = repo.create_message("hello", alice.id, bob.id)

    assert message.id
    assert message.is_read is False


def test_update_missing_message_raises(repo):
    with pytest.raises(RepositoryException):
        repo.update_message_text("does-not-exist", "x")


def test_delete_returns_pre_delete_record(unit_db, repo, users):
    alice, bob, _ = users
    message = _message(unit_db, alice, bob, "bye")

    deleted = repo.delete_message(message.id)

    assert deleted.id == message.id
    assert deleted.sender_id == alice.id
    assert deleted.receiver_id == bob.id
    assert repo.get_by_id(message.id) is None


def test_delete_missing_message_raises(repo):
    with pytest.raises(RepositoryException):
        repo.delete_message("does-not-exist")


def test_conversation_includes_both_directions_oldest_first(unit_db, repo, users):
    alice, bob, carol = users
    first = _message(unit_db, alice, bob, "first", minutes_ago=3)
    second = _message(unit_db, bob, alice, "second", minutes_ago=2)
    _message(unit_db, carol, alice, "elsewhere", minutes_ago=1)

    conversation = repo.get_conversation(alice.id, bob.id)

    assert [m.id for m in conversation] == [first.id, second.id]


def test_unread_counts(unit_db, repo, users):
    alice, bob, carol = users
    _message(unit_db, bob, alice, "1")
    _message(unit_db, bob, alice, "2")
    _message(unit_db, carol, alice, "3")
    _message(unit_db, carol, alice, "4", is_read=True)

    assert repo.get_unread_count_for_user(alice.id) == 3
    assert repo.get_unread_counts_by_sender(alice.id) == {bob.id: 2, carol.id: 1}


def test_latest_message_per_peer_newest_first(unit_db, repo, users):
    alice, bob, carol = users
    _message(unit_db, alice, bob, "old bob", minutes_ago=10)
    latest_bob = _message(unit_db, bob, alice, "new bob", minutes_ago=5)
    latest_carol = _message(unit_db, alice, carol, "carol", minutes_ago=1)

    latest = repo.get_latest_message_per_peer(alice.id)

    assert [m.id for m in latest] == [latest_carol.id, latest_bob.id]


class TestTranslateDbError:
    def test_integrity_error_is_generic_storage_error(self):
        error = translate_db_error(IntegrityError("INSERT", {}, Exception("dup")), "create message")

        assert type(error) is RepositoryException

    def test_unclassified_driver_error_is_database_request_error(self):
        error = translate_db_error(DBAPIError("SELECT", {}, Exception("boom")), "create message")

        assert isinstance(error, DatabaseRequestError)
        assert isinstance(error, RepositoryException)

    def test_orm_error_is_generic_storage_error(self):
        error = translate_db_error(SQLAlchemyError("orm failure"), "create message")

        assert type(error) is RepositoryException
