# backend/chatline/routes/websocket.py
"""
Websocket endpoint for live messaging.

Clients connect with ``?token=<access token>`` and exchange
``{"type": ..., "payload": ...}`` frames. The path comes from
``Settings.ws_path`` and is mounted by ``create_app``.
"""

from fastapi import WebSocket

from ..realtime.session import serve_connection


async def websocket_endpoint(websocket: WebSocket) -> None:
    state = websocket.app.state
    await serve_connection(
        websocket,
        registry=state.connection_registry,
        token_service=state.token_service,
        dispatcher=state.dispatcher,
    )
