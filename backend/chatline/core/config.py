# backend/chatline/core/config.py
import logging
import os
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


def is_running_tests() -> bool:
    """
    Detect if code is running under pytest.

    PYTEST_CURRENT_TEST is set automatically by pytest during test runs, and is
    not expected to be present in production environments.
    """
    return os.getenv("PYTEST_CURRENT_TEST") is not None


logger = logging.getLogger(__name__)

# Load .env file only if not in CI
if not os.getenv("CI"):
    env_path = Path(__file__).parent.parent.parent / ".env"  # Goes up to backend/.env
    logger.debug(f"[CONFIG] Looking for .env at: {env_path}")
    load_dotenv(env_path)


class Settings(BaseSettings):
    environment: str = Field(default="development", description="Deployment environment name")
    database_url: str = Field(
        default="sqlite:///./chatline.db",
        description="SQLAlchemy database URL",
    )

    # Use a default secret key for local development and tests
    secret_key: SecretStr = Field(
        default=SecretStr("dev-secret-key-not-for-production"),
        description="Secret key for JWT access tokens",
    )
    refresh_secret_key: Optional[SecretStr] = Field(
        default=None,
        description="Secret for refresh tokens (defaults to SECRET_KEY)",
    )
    algorithm: str = "HS256"
    access_token_expire_minutes: int = 60  # 1 hour
    refresh_token_expire_days: int = 7
    access_token_cookie_name: str = "accessToken"
    bcrypt_rounds: int = 12

    cors_allowed_origins: str = Field(
        default="http://localhost:5173",
        description="Comma-separated origins allowed to call the HTTP API",
    )

    # Realtime
    ws_path: str = "/ws"
    ws_enforce_sender_identity: bool = Field(
        default=False,
        description="Bind senderId to the authenticated identity for websocket events",
    )

    auto_create_tables: bool = True
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env" if not os.getenv("CI") else None,
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _normalize_log_level(cls, value: object) -> object:
        if isinstance(value, str):
            return value.strip().upper()
        return value

    @property
    def cors_origins(self) -> list[str]:
        return [origin.strip() for origin in self.cors_allowed_origins.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.environment.strip().lower() in {"prod", "production"}

    def jwt_secret(self) -> str:
        return self.secret_key.get_secret_value()

    def jwt_refresh_secret(self) -> str:
        if self.refresh_secret_key is not None:
            return self.refresh_secret_key.get_secret_value()
        return self.secret_key.get_secret_value()


settings = Settings()
