# backend/chatline/main.py
"""
Chatline API application.

HTTP endpoints for accounts, friends and message history, plus the
websocket endpoint that carries live message traffic.
"""

from contextlib import asynccontextmanager
import logging
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .auth import TokenService
from .core.config import Settings, is_running_tests, settings
from .database import SessionLocal, build_engine, create_session_factory, engine, init_db
from .errors import register_error_handlers
from .realtime.dispatcher import Dispatcher
from .realtime.gateway import MessageGateway, SqlMessageGateway
from .realtime.handlers import EventHandlers
from .realtime.registry import ConnectionRegistry
from .routes import auth, friends, health, messages, websocket

# Configure logging
logging.basicConfig(
    level=settings.log_level, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)

logger = logging.getLogger(__name__)

BRAND_NAME = "Chatline"


@asynccontextmanager
async def app_lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Handle application startup/shutdown."""
    runtime_settings: Settings = app.state.settings
    logger.info(f"{BRAND_NAME} API starting up...")
    logger.info(f"Environment: {runtime_settings.environment}")

    if is_running_tests():
        logger.info("Running under pytest (test mode active)")

    if runtime_settings.auto_create_tables:
        init_db(bind=app.state.engine)

    if runtime_settings.ws_enforce_sender_identity:
        logger.info("[WS] Sender identity enforcement enabled")

    yield

    registry: ConnectionRegistry = app.state.connection_registry
    logger.info(f"{BRAND_NAME} API shutting down with {len(registry)} live connections")


def create_app(
    config: Settings = settings,
    *,
    gateway: Optional[MessageGateway] = None,
    registry: Optional[ConnectionRegistry] = None,
) -> FastAPI:
    """
    Build the FastAPI application.

    Args:
        config: Settings to run with
        gateway: Message storage for websocket events (SQL by default)
        registry: Connection registry (a fresh one by default)
    """
    app = FastAPI(
        title=f"{BRAND_NAME} API",
        description="Direct messaging with live websocket delivery",
        version="1.0.0",
        lifespan=app_lifespan,
    )

    if config.database_url == settings.database_url:
        db_engine, session_factory = engine, SessionLocal
    else:
        db_engine = build_engine(config.database_url)
        session_factory = create_session_factory(db_engine)

    connection_registry = registry if registry is not None else ConnectionRegistry()
    handlers = EventHandlers(
        gateway if gateway is not None else SqlMessageGateway(session_factory),
        enforce_sender_identity=config.ws_enforce_sender_identity,
    )
    app.state.settings = config
    app.state.engine = db_engine
    app.state.session_factory = session_factory
    app.state.connection_registry = connection_registry
    app.state.token_service = TokenService(config)
    app.state.dispatcher = Dispatcher(connection_registry, handlers)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_error_handlers(app)

    app.include_router(auth.router)
    app.include_router(friends.router)
    app.include_router(messages.router)
    app.include_router(health.router)
    app.add_api_websocket_route(config.ws_path, websocket.websocket_endpoint)

    return app


app = create_app()
