# backend/chatline/realtime/registry.py
"""
Live connection registry.

Maps an authenticated identity to the single connection it can currently be
reached on. Registering an identity that is already present replaces the
previous connection without closing it; the old connection simply stops
receiving fan-out.

One registry is created per application and passed to whatever needs it
(the websocket session, the dispatcher, fan-out, the health endpoint).
"""

import logging
import threading
from typing import Dict, List, Optional

from ..monitoring.prometheus_metrics import prometheus_metrics
from .connection import Connection

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """
    Thread-safe identity -> connection map.

    Every operation holds the same lock for its whole read-modify-write, and
    none of them await while holding it, so callers never observe a torn
    state whether they run on the event loop or in worker threads.
    """

    def __init__(self) -> None:
        self._connections: Dict[str, Connection] = {}
        self._lock = threading.Lock()

    def register(self, identity: str, connection: Connection) -> None:
        """Store or replace the connection for ``identity``."""
        with self._lock:
            previous = self._connections.get(identity)
            self._connections[identity] = connection
            size = len(self._connections)

        if previous is not None and previous is not connection:
            logger.info(f"[WS] Replaced connection for user {identity}", extra={"user_id": identity})
        else:
            logger.info(f"[WS] Registered user {identity}", extra={"user_id": identity})
        prometheus_metrics.set_active_connections(size)

    def unregister(self, identity: str, connection: Optional[Connection] = None) -> bool:
        """
        Remove the entry for ``identity``. Missing identities are a no-op.

        When ``connection`` is given the entry is only removed if it is still
        that connection, so a superseded connection closing late does not
        evict its replacement.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            current = self._connections.get(identity)
            if current is None:
                return False
            if connection is not None and current is not connection:
                return False
            del self._connections[identity]
            size = len(self._connections)

        logger.info(f"[WS] Unregistered user {identity}", extra={"user_id": identity})
        prometheus_metrics.set_active_connections(size)
        return True

    def lookup(self, identity: str) -> Optional[Connection]:
        with self._lock:
            return self._connections.get(identity)

    @staticmethod
    def is_open(connection: Connection) -> bool:
        return bool(connection.is_open)

    def is_online(self, identity: str) -> bool:
        connection = self.lookup(identity)
        return connection is not None and self.is_open(connection)

    def identities(self) -> List[str]:
        """Snapshot of registered identities."""
        with self._lock:
            return list(self._connections)

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)

    def __contains__(self, identity: object) -> bool:
        with self._lock:
            return identity in self._connections
