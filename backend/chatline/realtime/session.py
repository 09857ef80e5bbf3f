# backend/chatline/realtime/session.py
"""
Websocket session lifecycle.

Handshake: the access token arrives as the ``token`` query parameter.
A missing or invalid token gets an error frame and a 1008 close, and the
connection is never registered. An authenticated connection is registered
and then read frame by frame until it closes, at which point it is
unregistered.
"""

import logging
from typing import Optional

from fastapi import WebSocket, WebSocketDisconnect

from ..auth import TokenService
from ..core.exceptions import AuthenticationError
from ..monitoring.prometheus_metrics import prometheus_metrics
from .connection import WS_POLICY_VIOLATION, WebSocketConnection
from .dispatcher import Dispatcher
from .protocol import error_frame
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)


async def authenticate_connection(
    websocket: WebSocket,
    connection: WebSocketConnection,
    token_service: TokenService,
) -> Optional[str]:
    """
    Verify the handshake token of a websocket that has not been accepted yet.

    A rejected connection is accepted only to receive the error frame and
    is then closed with 1008.

    Returns:
        The authenticated identity, or None after rejecting the connection
    """
    token = websocket.query_params.get("token") or ""
    try:
        identity = token_service.verify(token)
    except AuthenticationError as e:
        outcome = "missing_token" if not token else "invalid_token"
        logger.warning(f"[WS] Handshake rejected ({outcome}): {e.message}", extra={"code": e.code})
        prometheus_metrics.record_handshake(outcome)
        await websocket.accept()
        await connection.send_json(error_frame(e.message))
        await connection.close(code=WS_POLICY_VIOLATION, reason=e.message)
        return None

    prometheus_metrics.record_handshake("accepted")
    return identity


async def serve_connection(
    websocket: WebSocket,
    registry: ConnectionRegistry,
    token_service: TokenService,
    dispatcher: Dispatcher,
) -> None:
    """Run one websocket connection from handshake to close."""
    connection = WebSocketConnection(websocket)

    identity = await authenticate_connection(websocket, connection, token_service)
    if identity is None:
        return

    # Registered before the accept completes, so the client can be reached
    # as soon as it sees the handshake succeed. Fan-out skips it until then.
    registry.register(identity, connection)
    try:
        await websocket.accept()
        logger.info(f"[WS] User {identity} connected", extra={"user_id": identity})

        # Frames from one connection are handled strictly in order
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            raw = message.get("text")
            if raw is None:
                raw = message.get("bytes") or b""
            await dispatcher.dispatch(connection, identity, raw)
    except WebSocketDisconnect:
        logger.debug(f"[WS] User {identity} disconnected mid-send")
    finally:
        registry.unregister(identity, connection)
        logger.info(f"[WS] User {identity} disconnected", extra={"user_id": identity})
