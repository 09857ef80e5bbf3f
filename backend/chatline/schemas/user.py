from datetime import datetime
from typing import Optional

from pydantic import Field

from ._strict_base import CamelModel, StrictRequestModel


# Request fields default to empty so missing values reach the route and get the
# "Fields are Missing" response instead of a generic 422.
class SignupRequest(StrictRequestModel):
    name: str = ""
    email: str = ""
    password: str = ""


class LoginRequest(StrictRequestModel):
    email: str = ""
    password: str = ""


class RefreshRequest(CamelModel):
    refresh_token: str = ""


class UserResponse(CamelModel):
    id: str
    name: str
    email: str
    created_at: datetime
    updated_at: Optional[datetime] = None


class FriendResponse(CamelModel):
    id: str
    name: str
    email: str


class AddFriendRequest(CamelModel):
    friend_email: str = ""


class DeleteFriendRequest(CamelModel):
    id: str = Field(..., min_length=1)


class StatusResponse(CamelModel):
    type: str = "success"
    message: str
    status: Optional[int] = None


class LoginResponse(CamelModel):
    type: str = "success"
    status: int = 200
    message: str = "Logged in successfully"
    data: UserResponse
    token: str
    refresh_token: str


class UsersResponse(CamelModel):
    type: str = "success"
    status: int = 200
    data: list[UserResponse]


class RefreshResponse(CamelModel):
    type: str = "success"
    token: str
