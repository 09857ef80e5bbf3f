"""
Realtime messaging over websockets.

Connection registry, frame protocol, event handlers, fan-out delivery and
the per-connection session loop.
"""

from .connection import WS_POLICY_VIOLATION, Connection, WebSocketConnection
from .delivery import deliver_to_set
from .dispatcher import Dispatcher
from .gateway import MessageGateway, SqlMessageGateway
from .handlers import EventHandlers, HandlerResult
from .protocol import InboundEventType, OutboundEventType
from .registry import ConnectionRegistry
from .session import serve_connection

__all__ = [
    "Connection",
    "ConnectionRegistry",
    "Dispatcher",
    "EventHandlers",
    "HandlerResult",
    "InboundEventType",
    "MessageGateway",
    "OutboundEventType",
    "SqlMessageGateway",
    "WS_POLICY_VIOLATION",
    "WebSocketConnection",
    "deliver_to_set",
    "serve_connection",
]
