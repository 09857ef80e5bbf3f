# backend/chatline/realtime/connection.py
"""
Connection handles held by the registry.

The registry and fan-out only need three things from a transport: whether
it is still open, a way to send a JSON frame, and a way to close it.
"""

from typing import Any, Dict, Protocol

from fastapi import WebSocket
from starlette.websockets import WebSocketState

# RFC 6455 close codes
WS_POLICY_VIOLATION = 1008


class Connection(Protocol):
    @property
    def is_open(self) -> bool:
        ...

    async def send_json(self, data: Dict[str, Any]) -> None:
        ...

    async def close(self, code: int, reason: str = "") -> None:
        ...


class WebSocketConnection:
    """Adapts a Starlette ``WebSocket`` to the ``Connection`` protocol."""

    def __init__(self, websocket: WebSocket) -> None:
        self.websocket = websocket

    @property
    def is_open(self) -> bool:
        return (
            self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    async def send_json(self, data: Dict[str, Any]) -> None:
        await self.websocket.send_json(data)

    async def close(self, code: int, reason: str = "") -> None:
        if self.websocket.application_state == WebSocketState.DISCONNECTED:
            return
        await self.websocket.close(code=code, reason=reason)

    def __repr__(self) -> str:
        client = self.websocket.client
        return f"WebSocketConnection({client.host}:{client.port})" if client else "WebSocketConnection()"
