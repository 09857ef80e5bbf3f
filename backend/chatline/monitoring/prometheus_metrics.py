"""
Prometheus metrics module for Chatline.

Metrics live in a private registry so tests and multiple app instances do
not collide with the process-wide default registry.
"""

from typing import Optional

from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, Counter, Gauge, Histogram, generate_latest

# Create a custom registry to avoid conflicts with default metrics
REGISTRY = CollectorRegistry()

service_operation_duration_seconds = Histogram(
    "chatline_service_operation_duration_seconds",
    "Service operation duration in seconds",
    ["service", "operation"],
    registry=REGISTRY,
    buckets=(0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5),
)

service_operations_total = Counter(
    "chatline_service_operations_total",
    "Total number of service operations",
    ["service", "operation", "status"],
    registry=REGISTRY,
)

errors_total = Counter(
    "chatline_errors_total",
    "Total number of errors",
    ["service", "operation", "error_type"],
    registry=REGISTRY,
)

ws_active_connections = Gauge(
    "chatline_ws_active_connections",
    "Identities currently registered with a live websocket connection",
    registry=REGISTRY,
)

ws_handshakes_total = Counter(
    "chatline_ws_handshakes_total",
    "Websocket handshakes by outcome",
    ["outcome"],
    registry=REGISTRY,
)

ws_frames_total = Counter(
    "chatline_ws_frames_total",
    "Inbound websocket frames by event type and outcome",
    ["event_type", "outcome"],
    registry=REGISTRY,
)

ws_deliveries_total = Counter(
    "chatline_ws_deliveries_total",
    "Fan-out delivery attempts by outcome",
    ["outcome"],
    registry=REGISTRY,
)


class PrometheusMetrics:
    """Thin facade so callers record metrics without touching collectors directly."""

    def record_service_operation(
        self,
        service: str,
        operation: str,
        duration: float,
        status: str,
        error_type: Optional[str] = None,
    ) -> None:
        service_operation_duration_seconds.labels(service=service, operation=operation).observe(duration)
        service_operations_total.labels(service=service, operation=operation, status=status).inc()
        if error_type:
            errors_total.labels(service=service, operation=operation, error_type=error_type).inc()

    def set_active_connections(self, count: int) -> None:
        ws_active_connections.set(count)

    def record_handshake(self, outcome: str) -> None:
        ws_handshakes_total.labels(outcome=outcome).inc()

    def record_frame(self, event_type: str, outcome: str) -> None:
        ws_frames_total.labels(event_type=event_type, outcome=outcome).inc()

    def record_delivery(self, outcome: str) -> None:
        ws_deliveries_total.labels(outcome=outcome).inc()

    def get_metrics(self) -> bytes:
        return generate_latest(REGISTRY)

    @property
    def content_type(self) -> str:
        return CONTENT_TYPE_LATEST


prometheus_metrics = PrometheusMetrics()
