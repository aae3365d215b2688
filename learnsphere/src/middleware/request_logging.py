"""
Request logging and Prometheus metrics middleware.

Every request gets a correlation id (taken from ``X-Correlation-ID`` or
generated), which is bound to the structlog context for the duration of the
request and echoed back in the response headers.
"""

import time
import uuid
import structlog

from fastapi import Request
from prometheus_client import Counter, Gauge, Histogram
from starlette.middleware.base import BaseHTTPMiddleware

from learnsphere.shared.logging import bound_context

logger = structlog.get_logger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"

# ============================================================================
# Prometheus Metrics
# ============================================================================

http_requests_total = Counter(
    "learnsphere_http_requests_total",
    "Total HTTP requests",
    ["method", "endpoint", "status"]
)

http_request_duration_seconds = Histogram(
    "learnsphere_http_request_duration_seconds",
    "HTTP request duration in seconds",
    ["method", "endpoint"]
)

http_requests_in_progress = Gauge(
    "learnsphere_http_requests_in_progress",
    "HTTP requests currently in progress",
    ["method"]
)


def endpoint_label(request: Request) -> str:
    """Route template (``/api/history/{entry_id}``) so ids do not explode label cardinality."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request logging and metrics."""

    def __init__(self, app, metrics_enabled: bool = True):
        super().__init__(app)
        self.metrics_enabled = metrics_enabled

    async def dispatch(self, request: Request, call_next):
        """Process request and log details."""
        correlation_id = request.headers.get(CORRELATION_HEADER) or str(uuid.uuid4())
        request.state.correlation_id = correlation_id

        with bound_context(correlation_id=correlation_id):
            response = await self._observe(request, call_next)

        response.headers[CORRELATION_HEADER] = correlation_id
        return response

    async def _observe(self, request: Request, call_next):
        method = request.method
        path = request.url.path
        client_ip = request.client.host if request.client else "unknown"

        if self.metrics_enabled:
            http_requests_in_progress.labels(method=method).inc()

        start_time = time.perf_counter()
        logger.info("request_started", method=method, path=path, client_ip=client_ip)

        try:
            response = await call_next(request)
            duration = time.perf_counter() - start_time

            if self.metrics_enabled:
                endpoint = endpoint_label(request)
                http_requests_total.labels(
                    method=method,
                    endpoint=endpoint,
                    status=response.status_code
                ).inc()
                http_request_duration_seconds.labels(
                    method=method,
                    endpoint=endpoint
                ).observe(duration)

            logger.info(
                "request_completed",
                method=method,
                path=path,
                status_code=response.status_code,
                duration=f"{duration:.3f}s"
            )
            return response

        except Exception as e:
            duration = time.perf_counter() - start_time
            logger.error(
                "request_failed",
                method=method,
                path=path,
                error=str(e),
                duration=f"{duration:.3f}s",
                exc_info=True
            )
            raise

        finally:
            if self.metrics_enabled:
                http_requests_in_progress.labels(method=method).dec()
