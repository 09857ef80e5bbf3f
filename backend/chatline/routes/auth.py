# backend/chatline/routes/auth.py
"""
Authentication routes.

Endpoints:
    POST /signup     → Register a user
    POST /login      → Issue access + refresh tokens, set the access cookie
    POST /refresh    → Exchange a refresh token for a new access token
    GET  /logout     → Revoke the refresh token and clear the cookie
    GET  /getUsers   → List every user
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, Response, status

from ..api.dependencies.auth import get_current_user_id
from ..api.dependencies.services import get_auth_service, get_connection_registry
from ..core.config import settings
from ..realtime.registry import ConnectionRegistry
from ..schemas.user import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    SignupRequest,
    StatusResponse,
    UserResponse,
    UsersResponse,
)
from ..services.auth_service import AuthService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["auth"])


def _set_access_cookie(response: Response, access_token: str) -> None:
    response.set_cookie(
        key=settings.access_token_cookie_name,
        value=access_token,
        httponly=True,
        secure=settings.is_production,
        samesite="lax",
        max_age=settings.access_token_expire_minutes * 60,
        path="/",
    )


@router.post("/signup", response_model=StatusResponse, status_code=status.HTTP_201_CREATED)
def signup(
    payload: SignupRequest,
    auth_service: AuthService = Depends(get_auth_service),
) -> StatusResponse:
    auth_service.register_user(payload.name, payload.email, payload.password)
    return StatusResponse(message="Successfully created user", status=status.HTTP_201_CREATED)


@router.post("/login", response_model=LoginResponse)
def login(
    payload: LoginRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
) -> LoginResponse:
    """
    Verify credentials and return the user with a token pair.

    The access token is also set as an HTTP-only cookie for browser clients.
    """
    user, access_token, refresh_token = auth_service.login(payload.email, payload.password)
    _set_access_cookie(response, access_token)
    return LoginResponse(
        data=UserResponse.model_validate(user),
        token=access_token,
        refresh_token=refresh_token,
    )


@router.post("/refresh", response_model=RefreshResponse)
def refresh(
    payload: RefreshRequest,
    response: Response,
    auth_service: AuthService = Depends(get_auth_service),
) -> RefreshResponse:
    access_token = auth_service.refresh_access_token(payload.refresh_token)
    _set_access_cookie(response, access_token)
    return RefreshResponse(token=access_token)


@router.get("/logout", response_model=StatusResponse)
def logout(
    response: Response,
    user_id: str = Depends(get_current_user_id),
    auth_service: AuthService = Depends(get_auth_service),
    registry: ConnectionRegistry = Depends(get_connection_registry),
) -> StatusResponse:
    """Revoke the refresh token and drop the user from live fan-out."""
    auth_service.logout(user_id)
    registry.unregister(user_id)
    response.delete_cookie(key=settings.access_token_cookie_name, path="/")
    return StatusResponse(message="Logged out successfully", status=status.HTTP_200_OK)


@router.get("/getUsers", response_model=UsersResponse, dependencies=[Depends(get_current_user_id)])
def get_users(
    auth_service: AuthService = Depends(get_auth_service),
) -> UsersResponse:
    users: List[UserResponse] = [UserResponse.model_validate(u) for u in auth_service.list_users()]
    return UsersResponse(data=users)
