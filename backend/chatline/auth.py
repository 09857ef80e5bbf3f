# backend/chatline/auth.py
"""
Credential and token helpers.

Password hashing uses bcrypt through passlib. Access and refresh tokens are
HS256 JWTs carrying the user id in both the ``userId`` and ``sub`` claims.
"""

from datetime import datetime, timedelta, timezone
import logging
from typing import Any, Dict, Optional, cast

import jwt
from jwt import ExpiredSignatureError, PyJWTError
from passlib.context import CryptContext

from .core.config import Settings, settings
from .core.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=settings.bcrypt_rounds)

# Pre-computed bcrypt hash for timing attack prevention.
# Compared against when the user doesn't exist so lookups cost the same either way.
DUMMY_HASH_FOR_TIMING_ATTACK = "$2b$12$LQv3c1yqBWVHxkd0LHAkCOYz6TtxMQJqhN8/X4.V4ferVKnNaOuJi"

IDENTITY_CLAIM = "userId"
ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Args:
        plain_password: The plain text password
        hashed_password: The hashed password to compare against

    Returns:
        bool: True if password matches, False otherwise
    """
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except Exception as e:
        logger.error(f"Error verifying password: {str(e)}")
        return False


def get_password_hash(password: str) -> str:
    """Hash a password using bcrypt."""
    return str(pwd_context.hash(password))


def _encode(claims: Dict[str, Any], secret: str, algorithm: str) -> str:
    return cast(str, jwt.encode(claims, secret, algorithm=algorithm))


def create_access_token(
    identity: str,
    expires_delta: Optional[timedelta] = None,
    *,
    config: Settings = settings,
) -> str:
    """
    Create a JWT access token for ``identity``.

    Args:
        identity: The user id to embed
        expires_delta: Optional expiration time delta

    Returns:
        str: The encoded JWT token
    """
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=config.access_token_expire_minutes))
    claims = {
        IDENTITY_CLAIM: identity,
        "sub": identity,
        "type": ACCESS_TOKEN_TYPE,
        "iat": now,
        "exp": expire,
    }
    logger.debug(f"Created access token for user: {identity}")
    return _encode(claims, config.jwt_secret(), config.algorithm)


def create_refresh_token(
    identity: str,
    expires_delta: Optional[timedelta] = None,
    *,
    config: Settings = settings,
) -> str:
    """Create a long-lived refresh token signed with the refresh secret."""
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(days=config.refresh_token_expire_days))
    claims = {
        IDENTITY_CLAIM: identity,
        "sub": identity,
        "type": REFRESH_TOKEN_TYPE,
        "iat": now,
        "exp": expire,
    }
    return _encode(claims, config.jwt_refresh_secret(), config.algorithm)


def decode_access_token(token: str, *, config: Settings = settings) -> Dict[str, Any]:
    """Decode and verify an access token. Raises PyJWTError on any failure."""
    return cast(Dict[str, Any], jwt.decode(token, config.jwt_secret(), algorithms=[config.algorithm]))


def decode_refresh_token(token: str, *, config: Settings = settings) -> Dict[str, Any]:
    """Decode and verify a refresh token. Raises PyJWTError on any failure."""
    return cast(Dict[str, Any], jwt.decode(token, config.jwt_refresh_secret(), algorithms=[config.algorithm]))


def identity_from_claims(payload: Dict[str, Any]) -> Optional[str]:
    identity = payload.get(IDENTITY_CLAIM) or payload.get("sub")
    if identity is None or isinstance(identity, (dict, list)):
        return None
    return str(identity)


class TokenService:
    """
    Verifies access tokens and issues new ones.

    This is the only credential contract the realtime layer depends on:
    ``verify(token)`` returns the identity or raises ``AuthenticationError``.
    """

    def __init__(self, config: Settings = settings) -> None:
        self.config = config

    def issue(self, identity: str) -> str:
        return create_access_token(identity, config=self.config)

    def verify(self, token: str) -> str:
        if not token:
            raise AuthenticationError("Access denied. No token provided.")
        try:
            payload = decode_access_token(token, config=self.config)
        except ExpiredSignatureError as e:
            logger.info("Rejected expired access token")
            raise AuthenticationError("Unauthorized", code="TOKEN_EXPIRED") from e
        except PyJWTError as e:
            logger.info(f"Rejected invalid access token: {e}")
            raise AuthenticationError("Unauthorized", code="TOKEN_INVALID") from e

        if payload.get("type", ACCESS_TOKEN_TYPE) != ACCESS_TOKEN_TYPE:
            raise AuthenticationError("Unauthorized", code="TOKEN_WRONG_TYPE")

        identity = identity_from_claims(payload)
        if identity is None:
            logger.warning("Token payload missing identity claim")
            raise AuthenticationError("Unauthorized", code="TOKEN_MISSING_IDENTITY")
        return identity
