# backend/chatline/schemas/message.py
"""
Message schemas shared by the HTTP API and the websocket protocol.
"""

from datetime import datetime
from typing import List, Optional

from pydantic import Field

from ._strict_base import CamelModel


class MessageResponse(CamelModel):
    """A persisted message as clients see it."""

    id: str
    text: str
    sender_id: str
    receiver_id: str
    is_read: bool = False
    created_at: datetime
    updated_at: Optional[datetime] = None


class ConversationResponse(CamelModel):
    peer_id: str
    messages: List[MessageResponse]


class RecentChatResponse(CamelModel):
    peer_id: str
    last_message: MessageResponse
    unread_count: int = Field(default=0, ge=0)


class UnreadCountResponse(CamelModel):
    user_id: str
    unread_count: int
