"""Middleware for request/response metrics."""
import time
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from prometheus_client import Counter, Histogram
from batchsmith.config import get_settings

settings = get_settings()


# HTTP metrics
http_requests_total = Counter(
    'batchsmith_http_requests_total',
    'Total HTTP requests',
    ['method', 'endpoint', 'status']
)

http_request_duration_seconds = Histogram(
    'batchsmith_http_request_duration_seconds',
    'HTTP request duration in seconds',
    ['method', 'endpoint'],
    # Generation requests run whole jobs, so the tail is long
    buckets=[0.005, 0.025, 0.1, 0.5, 1.0, 5.0, 30.0, 120.0, 600.0, 1800.0]
)


def _endpoint_label(request: Request) -> str:
    # Route template keeps job ids out of label values
    route = request.scope.get("route")
    template = getattr(route, "path", None)
    if template is None:
        return request.url.path

    # Included routers may report their path without the mount prefix
    prefix = settings.API_V1_PREFIX
    if request.url.path.startswith(prefix) and not template.startswith(prefix):
        template = f"{prefix}{template}"
    return template


class MetricsMiddleware(BaseHTTPMiddleware):
    """Middleware to track HTTP request metrics."""

    async def dispatch(self, request: Request, call_next):
        """
        Process request and track metrics.

        Args:
            request: FastAPI request
            call_next: Next middleware/handler

        Returns:
            Response
        """
        # Skip metrics endpoint to avoid recursion
        if request.url.path == f"{settings.API_V1_PREFIX}/metrics":
            return await call_next(request)

        method = request.method
        start_time = time.time()
        status = 500

        try:
            response = await call_next(request)
            status = response.status_code
            return response
        finally:
            endpoint = _endpoint_label(request)
            http_requests_total.labels(
                method=method,
                endpoint=endpoint,
                status=status
            ).inc()
            http_request_duration_seconds.labels(
                method=method,
                endpoint=endpoint
            ).observe(time.time() - start_time)
