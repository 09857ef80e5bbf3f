from .message import ConversationResponse, MessageResponse, RecentChatResponse, UnreadCountResponse
from .user import (
    AddFriendRequest,
    DeleteFriendRequest,
    FriendResponse,
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    SignupRequest,
    StatusResponse,
    UserResponse,
    UsersResponse,
)

__all__ = [
    "AddFriendRequest",
    "ConversationResponse",
    "DeleteFriendRequest",
    "FriendResponse",
    "LoginRequest",
    "LoginResponse",
    "MessageResponse",
    "RecentChatResponse",
    "RefreshRequest",
    "RefreshResponse",
    "SignupRequest",
    "StatusResponse",
    "UnreadCountResponse",
    "UserResponse",
    "UsersResponse",
]
