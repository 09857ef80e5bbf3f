# backend/chatline/routes/health.py
"""
Health and metrics endpoints.

These endpoints are used for monitoring application health and scraping
Prometheus metrics.
"""

import logging

from fastapi import APIRouter, Depends, Response
from pydantic import BaseModel

from ..api.dependencies.services import get_connection_registry
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..realtime.registry import ConnectionRegistry

logger = logging.getLogger(__name__)
router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    status: str
    connections: int


@router.get("/health", response_model=HealthResponse)
def health_check(
    response: Response,
    registry: ConnectionRegistry = Depends(get_connection_registry),
) -> HealthResponse:
    response.headers["Cache-Control"] = "no-store"
    return HealthResponse(status="ok", connections=len(registry))


@router.get("/metrics", include_in_schema=False)
def metrics() -> Response:
    """Prometheus metrics in text exposition format."""
    return Response(content=prometheus_metrics.get_metrics(), media_type=prometheus_metrics.content_type)
