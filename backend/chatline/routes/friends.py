# backend/chatline/routes/friends.py
"""Friendship routes."""

import logging
from typing import List

from fastapi import APIRouter, Depends, status

from ..api.dependencies.auth import get_current_user_id
from ..api.dependencies.services import get_friend_service
from ..schemas.user import AddFriendRequest, DeleteFriendRequest, FriendResponse, StatusResponse
from ..services.friend_service import FriendService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["friends"])


@router.post("/addFriends", response_model=StatusResponse, status_code=status.HTTP_201_CREATED)
def add_friend(
    payload: AddFriendRequest,
    user_id: str = Depends(get_current_user_id),
    friend_service: FriendService = Depends(get_friend_service),
) -> StatusResponse:
    friend_service.add_friend(user_id, payload.friend_email)
    return StatusResponse(message="Friend added successfully", status=status.HTTP_201_CREATED)


@router.get("/getFriends", response_model=List[FriendResponse])
def get_friends(
    user_id: str = Depends(get_current_user_id),
    friend_service: FriendService = Depends(get_friend_service),
) -> List[FriendResponse]:
    return [FriendResponse.model_validate(friend) for friend in friend_service.get_friends(user_id)]


@router.delete("/deleteFriend", response_model=StatusResponse)
def delete_friend(
    payload: DeleteFriendRequest,
    user_id: str = Depends(get_current_user_id),
    friend_service: FriendService = Depends(get_friend_service),
) -> StatusResponse:
    friend_service.remove_friend(user_id, payload.id)
    return StatusResponse(message="Friend removed successfully", status=status.HTTP_200_OK)
