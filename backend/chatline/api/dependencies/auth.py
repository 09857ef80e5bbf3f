# backend/chatline/api/dependencies/auth.py
"""
Authentication dependencies for HTTP routes.

The access token is read from the ``Authorization: Bearer`` header, falling
back to the ``accessToken`` cookie set at login.
"""

import logging
from typing import Optional

from fastapi import Depends, Request
from fastapi.security import OAuth2PasswordBearer

from ...auth import TokenService
from ...core.config import settings

logger = logging.getLogger(__name__)

oauth2_scheme_optional = OAuth2PasswordBearer(tokenUrl="login", auto_error=False)


def get_token_service(request: Request) -> TokenService:
    token_service: Optional[TokenService] = getattr(request.app.state, "token_service", None)
    return token_service or TokenService(settings)


async def get_current_user_id(
    request: Request,
    token: Optional[str] = Depends(oauth2_scheme_optional),
    token_service: TokenService = Depends(get_token_service),
) -> str:
    """
    Dependency returning the authenticated user id.

    Raises:
        AuthenticationError: If no token is present or it does not verify
    """
    if not token:
        # Cookie fallback when no Authorization header is present
        token = request.cookies.get(settings.access_token_cookie_name)
        if token:
            logger.debug(f"Using {settings.access_token_cookie_name} cookie for authentication")

    return token_service.verify(token or "")
