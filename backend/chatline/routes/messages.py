# backend/chatline/routes/messages.py
"""
Message history routes.

Live message traffic goes over the websocket; these endpoints serve
history and unread counts.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from ..api.dependencies.auth import get_current_user_id
from ..api.dependencies.services import get_message_service
from ..core.exceptions import ForbiddenException
from ..schemas.message import ConversationResponse, MessageResponse, RecentChatResponse, UnreadCountResponse
from ..services.message_service import MessageService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["messages"])


@router.get("/getMessages/{peer_id}", response_model=ConversationResponse)
def get_messages(
    peer_id: str,
    limit: Optional[int] = Query(None, ge=1, le=1000),
    user_id: str = Depends(get_current_user_id),
    message_service: MessageService = Depends(get_message_service),
) -> ConversationResponse:
    """Conversation between the caller and ``peer_id``, oldest first."""
    messages = message_service.get_conversation(user_id, peer_id, limit=limit)
    return ConversationResponse(
        peer_id=peer_id,
        messages=[MessageResponse.model_validate(m) for m in messages],
    )


@router.get("/recentChats/{target_user_id}", response_model=List[RecentChatResponse])
def get_recent_chats(
    target_user_id: str,
    user_id: str = Depends(get_current_user_id),
    message_service: MessageService = Depends(get_message_service),
) -> List[RecentChatResponse]:
    if target_user_id != user_id:
        logger.warning(f"User {user_id} requested recent chats of {target_user_id}")
        raise ForbiddenException("You can only view your own chats", code="NOT_OWNER")

    return [
        RecentChatResponse(
            peer_id=chat["peer_id"],
            last_message=MessageResponse.model_validate(chat["last_message"]),
            unread_count=chat["unread_count"],
        )
        for chat in message_service.get_recent_chats(user_id)
    ]


@router.get("/unreadCount", response_model=UnreadCountResponse)
def get_unread_count(
    user_id: str = Depends(get_current_user_id),
    message_service: MessageService = Depends(get_message_service),
) -> UnreadCountResponse:
    return UnreadCountResponse(user_id=user_id, unread_count=message_service.get_unread_count(user_id))
