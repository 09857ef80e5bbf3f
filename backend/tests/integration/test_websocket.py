from fastapi.testclient import TestClient
import pytest
from starlette.websockets import WebSocketDisconnect

from chatline.auth import create_access_token
from chatline.core.config import settings
from chatline.main import create_app
from chatline.models.message import Message
from chatline.models.user import User


def _ws_url(user) -> str:
    return f"/ws?token={create_access_token(user.id)}"


@pytest.fixture
def alice(create_user):
    return create_user(name="Alice", email="alice@example.com")


@pytest.fixture
def bob(create_user):
    return create_user(name="Bob", email="bob@example.com")


class TestHandshake:
    def test_missing_token_is_rejected_with_policy_violation(self, client, app):
        with client.websocket_connect("/ws") as ws:
            assert ws.receive_json() == {"type": "error", "message": "Access denied. No token provided."}
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()

        assert exc.value.code == 1008
        assert len(app.state.connection_registry) == 0

    def test_invalid_token_is_rejected_with_policy_violation(self, client, app):
        with client.websocket_connect("/ws?token=not-a-token") as ws:
            assert ws.receive_json() == {"type": "error", "message": "Unauthorized"}
            with pytest.raises(WebSocketDisconnect) as exc:
                ws.receive_json()

        assert exc.value.code == 1008
        assert len(app.state.connection_registry) == 0

    def test_valid_token_registers_connection(self, client, app, alice):
        with client.websocket_connect(_ws_url(alice)):
            assert app.state.connection_registry.is_online(alice.id)

        assert len(app.state.connection_registry) == 0

    def test_closing_superseded_connection_keeps_the_replacement(self, client, app, alice, bob):
        registry = app.state.connection_registry
        first_session = client.websocket_connect(_ws_url(alice))
        first_session.__enter__()

        with client.websocket_connect(_ws_url(alice)) as second, client.websocket_connect(_ws_url(bob)) as ws_b:
            first_session.__exit__(None, None, None)

            assert registry.is_online(alice.id)
            ws_b.send_json(
                {"type": "message:create", "payload": {"text": "still here?", "senderId": bob.id, "receiverId": alice.id}}
            )
            assert ws_b.receive_json()["type"] == "message:created"
            assert second.receive_json()["payload"]["text"] == "still here?"

        assert len(registry) == 0


class TestMessaging:
    def test_create_is_delivered_to_sender_and_receiver(self, client, db, alice, bob):
        with client.websocket_connect(_ws_url(alice)) as ws_a, client.websocket_connect(_ws_url(bob)) as ws_b:
            ws_a.send_json(
                {"type": "message:create", "payload": {"text": "hi", "senderId": alice.id, "receiverId": bob.id}}
            )

            frame_a = ws_a.receive_json()
            frame_b = ws_b.receive_json()

        assert frame_a == frame_b
        assert frame_a["type"] == "message:created"
        assert frame_a["payload"]["text"] == "hi"
        assert frame_a["payload"]["senderId"] == alice.id
        assert frame_a["payload"]["receiverId"] == bob.id
        assert db.get(Message, frame_a["payload"]["id"]) is not None

    def test_update_delete_and_read_flow(self, client, db, alice, bob):
        with client.websocket_connect(_ws_url(alice)) as ws_a, client.websocket_connect(_ws_url(bob)) as ws_b:
            ws_a.send_json(
                {"type": "message:create", "payload": {"text": "draft", "senderId": alice.id, "receiverId": bob.id}}
            )
            message_id = ws_a.receive_json()["payload"]["id"]
            ws_b.receive_json()

            ws_a.send_json({"type": "message:update", "payload": {"id": message_id, "newText": "final"}})
            updated = ws_b.receive_json()
            assert updated["type"] == "message:updated"
            assert updated["payload"]["text"] == "final"
            assert ws_a.receive_json() == updated

            ws_b.send_json({"type": "message:read", "payload": {"senderId": alice.id, "receiverId": bob.id}})
            read = {"type": "message:read", "payload": {"senderId": alice.id, "receiverId": bob.id}}
            assert ws_a.receive_json() == read
            assert ws_b.receive_json() == read

            ws_a.send_json({"type": "message:delete", "payload": {"id": message_id}})
            deleted = ws_b.receive_json()
            assert deleted["type"] == "message:deleted"
            assert deleted["payload"]["id"] == message_id
            assert deleted["payload"]["isRead"] is True
            assert ws_a.receive_json() == deleted

        db.expire_all()
        assert db.get(Message, message_id) is None

    def test_errors_go_only_to_the_sender_and_keep_connection_open(self, client, alice, bob):
        with client.websocket_connect(_ws_url(alice)) as ws_a, client.websocket_connect(_ws_url(bob)) as ws_b:
            ws_a.send_text("definitely not json")
            assert ws_a.receive_json() == {"type": "error", "message": "Invalid JSON format"}

            ws_a.send_json({"type": "message:frobnicate", "payload": {}})
            assert ws_a.receive_json() == {"type": "error", "message": "Unknown event type"}

            ws_a.send_json({"type": "message:update", "payload": {"id": "missing", "newText": "x"}})
            assert ws_a.receive_json() == {"type": "error", "message": "Failed to update message"}

            # Still usable, and bob only sees the successful event
            ws_a.send_json(
                {"type": "message:create", "payload": {"text": "ok", "senderId": alice.id, "receiverId": bob.id}}
            )
            assert ws_a.receive_json()["type"] == "message:created"
            assert ws_b.receive_json()["type"] == "message:created"

    def test_create_for_unknown_receiver_is_rejected(self, client, db, alice):
        with client.websocket_connect(_ws_url(alice)) as ws:
            ws.send_json(
                {"type": "message:create", "payload": {"text": "hello?", "senderId": alice.id, "receiverId": "no-such-user"}}
            )
            assert ws.receive_json() == {"type": "error", "message": "Failed to create message"}

        db.expire_all()
        assert db.query(Message).count() == 0

    def test_message_to_self_is_delivered_once(self, client, alice):
        with client.websocket_connect(_ws_url(alice)) as ws:
            ws.send_json(
                {"type": "message:create", "payload": {"text": "memo", "senderId": alice.id, "receiverId": alice.id}}
            )
            assert ws.receive_json()["type"] == "message:created"

            # A second event proves no duplicate frame was queued for the first
            ws.send_json({"type": "message:frobnicate", "payload": {}})
            assert ws.receive_json() == {"type": "error", "message": "Unknown event type"}


def test_sender_identity_enforcement_overrides_payload(create_user):
    alice = create_user(name="Alice", email="alice@example.com")
    bob = create_user(name="Bob", email="bob@example.com")
    app = create_app(settings.model_copy(update={"ws_enforce_sender_identity": True}))

    with TestClient(app) as client, client.websocket_connect(_ws_url(alice)) as ws:
        ws.send_json(
            {"type": "message:create", "payload": {"text": "spoof", "senderId": bob.id, "receiverId": bob.id}}
        )
        frame = ws.receive_json()

    assert frame["type"] == "message:created"
    assert frame["payload"]["senderId"] == alice.id


def test_websocket_path_follows_config(create_user):
    alice = create_user(name="Alice", email="alice@example.com")
    app = create_app(settings.model_copy(update={"ws_path": "/live"}))

    with TestClient(app) as client:
        with client.websocket_connect(f"/live?token={create_access_token(alice.id)}"):
            assert app.state.connection_registry.is_online(alice.id)

        with pytest.raises(WebSocketDisconnect):
            with client.websocket_connect(_ws_url(alice)):
                pass


def test_database_follows_config(tmp_path, db):
    app = create_app(settings.model_copy(update={"database_url": f"sqlite:///{tmp_path / 'other.db'}"}))

    with TestClient(app) as client:
        response = client.post(
            "/signup", json={"name": "Dana", "email": "dana@example.com", "password": "Test1234"}
        )
        assert response.status_code == 201
        dana = client.post("/login", json={"email": "dana@example.com", "password": "Test1234"}).json()["data"]

        with client.websocket_connect(f"/ws?token={create_access_token(dana['id'])}") as ws:
            ws.send_json(
                {"type": "message:create", "payload": {"text": "memo", "senderId": dana["id"], "receiverId": dana["id"]}}
            )
            assert ws.receive_json()["type"] == "message:created"

    assert db.query(User).count() == 0
    assert db.query(Message).count() == 0
    app.state.engine.dispose()
