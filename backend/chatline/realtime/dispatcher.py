# backend/chatline/realtime/dispatcher.py
"""
Frame dispatcher.

Turns one raw inbound frame into either a fan-out of the handler's result
or a single error frame back to the connection that sent it. Errors never
close the connection and never reach other users.
"""

import logging
from typing import Any, Dict, Union

from ..core.exceptions import DatabaseRequestError, ForbiddenException, RepositoryException
from ..monitoring.prometheus_metrics import prometheus_metrics
from .connection import Connection
from .delivery import deliver_to_set, send_frame
from .handlers import EventHandlers
from .protocol import (
    DATABASE_REQUEST_ERROR_MESSAGE,
    FrameError,
    InboundEvent,
    PayloadValidationError,
    decode_frame,
    error_frame,
    failure_message,
)
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)


class Dispatcher:
    def __init__(self, registry: ConnectionRegistry, handlers: EventHandlers) -> None:
        self.registry = registry
        self.handlers = handlers

    async def dispatch(self, connection: Connection, identity: str, raw: Union[str, bytes]) -> None:
        """Process one frame received on ``connection`` from ``identity``."""
        try:
            event = decode_frame(raw)
        except FrameError as e:
            logger.info(f"[WS] Rejected frame from user {identity}: {e.message}", extra={"user_id": identity})
            prometheus_metrics.record_frame("invalid", "rejected")
            await self._reply_error(connection, e.message)
            return

        logger.debug(f"[WS] {event.kind.value} from user {identity}", extra={"user_id": identity})
        await self._handle(connection, identity, event)

    async def _handle(self, connection: Connection, identity: str, event: InboundEvent) -> None:
        kind = event.kind
        try:
            result = await self.handlers.handle(kind, event.payload, identity)
        except PayloadValidationError as e:
            logger.info(f"[WS] Invalid {kind.value} payload from user {identity}: {e.errors}")
            prometheus_metrics.record_frame(kind.value, "invalid_payload")
            await self._reply_error(connection, e.message)
            return
        except ForbiddenException as e:
            logger.warning(f"[WS] User {identity} not allowed to {kind.value}", extra={"user_id": identity})
            prometheus_metrics.record_frame(kind.value, "forbidden")
            await self._reply_error(connection, e.message)
            return
        except DatabaseRequestError:
            logger.error(f"[WS] Database request error handling {kind.value}", exc_info=True)
            prometheus_metrics.record_frame(kind.value, "database_error")
            await self._reply_error(connection, DATABASE_REQUEST_ERROR_MESSAGE)
            return
        except RepositoryException:
            logger.error(f"[WS] Storage error handling {kind.value}", exc_info=True)
            prometheus_metrics.record_frame(kind.value, "storage_error")
            await self._reply_error(connection, failure_message(kind))
            return
        except Exception:
            logger.exception(f"[WS] Unexpected error handling {kind.value}")
            prometheus_metrics.record_frame(kind.value, "error")
            await self._reply_error(connection, failure_message(kind))
            return

        prometheus_metrics.record_frame(kind.value, "ok")
        await deliver_to_set(self.registry, result.recipients, result.frame)

    async def _reply_error(self, connection: Connection, message: str) -> None:
        frame: Dict[str, Any] = error_frame(message)
        await send_frame(connection, frame)
