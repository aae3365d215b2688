"""FastAPI middleware components.

This package contains custom middleware for request/response processing:
request logging with correlation ids, Prometheus metrics, security headers
and rate limiting.
"""

from learnsphere.src.middleware.rate_limit import (
    auth_rate_limit,
    configure_limiter,
    limiter,
)
from learnsphere.src.middleware.request_logging import (
    RequestLoggingMiddleware,
    http_request_duration_seconds,
    http_requests_in_progress,
    http_requests_total,
)
from learnsphere.src.middleware.security_headers import SecurityHeadersMiddleware

__all__ = [
    # Request logging and metrics
    "RequestLoggingMiddleware",
    "http_requests_total",
    "http_request_duration_seconds",
    "http_requests_in_progress",
    # Security headers
    "SecurityHeadersMiddleware",
    # Rate limiting
    "limiter",
    "configure_limiter",
    "auth_rate_limit",
]
