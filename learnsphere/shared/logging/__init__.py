"""Structured logging module using structlog."""

from .structured_logger import (
    configure_logging,
    bound_context,
    clear_context,
    redact_sensitive,
)

__all__ = ["configure_logging", "bound_context", "clear_context", "redact_sensitive"]
