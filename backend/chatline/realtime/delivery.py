# backend/chatline/realtime/delivery.py
"""
Best-effort fan-out of outbound frames.

Recipients that are not registered, or whose connection has closed since
it was registered, are skipped. Nothing is queued or retried.
"""

import logging
from typing import Any, Dict, Iterable

from fastapi import WebSocketDisconnect

from ..monitoring.prometheus_metrics import prometheus_metrics
from .connection import Connection
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)

# Errors a transport raises when the peer went away mid-send
SEND_ERRORS = (WebSocketDisconnect, RuntimeError, OSError)


async def send_frame(connection: Connection, frame: Dict[str, Any]) -> bool:
    """Send ``frame`` on ``connection`` if it is open. Returns True if it was sent."""
    if not connection.is_open:
        return False
    try:
        await connection.send_json(frame)
    except SEND_ERRORS as e:
        logger.warning(f"[FANOUT] Send failed on {connection!r}: {e}")
        return False
    return True


async def deliver_to_set(registry: ConnectionRegistry, identities: Iterable[str], frame: Dict[str, Any]) -> int:
    """
    Deliver ``frame`` once to every identity in ``identities`` that is reachable.

    Duplicate identities are collapsed, so a sender messaging themselves gets
    a single frame.

    Returns:
        Number of connections the frame was sent on
    """
    recipients = set(identities)
    delivered = 0
    for identity in recipients:
        connection = registry.lookup(identity)
        if connection is None:
            prometheus_metrics.record_delivery("skipped_absent")
            continue
        # Checked right before sending; the connection may have closed since lookup
        if not registry.is_open(connection):
            prometheus_metrics.record_delivery("skipped_closed")
            logger.debug(f"[FANOUT] Skipping closed connection for user {identity}")
            continue
        if await send_frame(connection, frame):
            delivered += 1
            prometheus_metrics.record_delivery("sent")
        else:
            prometheus_metrics.record_delivery("failed")

    logger.debug(
        f"[FANOUT] Delivered {frame.get('type')} to {delivered}/{len(recipients)} recipients",
        extra={"event_type": frame.get("type"), "delivered": delivered},
    )
    return delivered
