"""
Observability module.

Provides structured logging, correlation ID tracking and request logging middleware.
"""

from chat_relay.observability.logger import configure_logging
from chat_relay.observability.middleware import CorrelationMiddleware, RequestLoggingMiddleware

__all__ = [
    "CorrelationMiddleware",
    "RequestLoggingMiddleware",
    "configure_logging",
]
