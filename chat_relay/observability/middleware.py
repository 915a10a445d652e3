"""
FastAPI middleware for observability.

Correlation ID and request logging middleware. Event-stream responses are
logged twice: once when headers are ready and once when the body finishes,
since the stream's lifetime is what matters for the relay endpoint.

Dependencies: fastapi, starlette
System role: Request/response observability injection
"""

import logging
import time
from collections.abc import AsyncIterator

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from chat_relay.observability.correlation import (
    clear_correlation_id,
    get_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger(__name__)

CORRELATION_HEADER = "X-Correlation-ID"
EVENT_STREAM_MEDIA_TYPE = "text/event-stream"


def _elapsed_ms(start_time: float) -> float:
    return round((time.time() - start_time) * 1000, 2)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for logging HTTP requests and responses."""

    async def dispatch(self, request: Request, call_next):
        """
        Log HTTP request and response with timing.

        Query strings are left out: the stream endpoint carries the session ID there.

        Args:
            request: FastAPI request
            call_next: Next middleware in chain

        Returns:
            Response: Response object
        """
        start_time = time.time()
        context = {
            "method": request.method,
            "path": request.url.path,
            "correlation_id": get_correlation_id() or "-",
        }

        logger.info(
            f"{context['method']} {context['path']}",
            extra={**context, "client_host": request.client.host if request.client else None},
        )

        try:
            response: Response = await call_next(request)
        except Exception as e:
            logger.exception(
                f"{context['method']} {context['path']} - Exception",
                extra={
                    **context,
                    "process_time_ms": _elapsed_ms(start_time),
                    "error_type": type(e).__name__,
                },
            )
            raise

        content_type = response.headers.get("content-type", "")
        if content_type.startswith(EVENT_STREAM_MEDIA_TYPE):
            logger.info(
                f"{context['method']} {context['path']} - {response.status_code} stream opened",
                extra={**context, "status_code": response.status_code, "time_to_headers_ms": _elapsed_ms(start_time)},
            )
            response.body_iterator = self._log_stream_end(
                response.body_iterator, context, response.status_code, start_time
            )
            return response

        logger.info(
            f"{context['method']} {context['path']} - {response.status_code}",
            extra={**context, "status_code": response.status_code, "process_time_ms": _elapsed_ms(start_time)},
        )
        return response

    @staticmethod
    async def _log_stream_end(
        body: AsyncIterator[bytes],
        context: dict,
        status_code: int,
        start_time: float,
    ) -> AsyncIterator[bytes]:
        sent_bytes = 0
        completed = False
        try:
            async for chunk in body:
                sent_bytes += len(chunk)
                yield chunk
            completed = True
        finally:
            outcome = "stream closed" if completed else "stream aborted"
            logger.info(
                f"{context['method']} {context['path']} - {status_code} {outcome}",
                extra={
                    **context,
                    "status_code": status_code,
                    "stream_bytes": sent_bytes,
                    "stream_completed": completed,
                    "process_time_ms": _elapsed_ms(start_time),
                },
            )


class CorrelationMiddleware(BaseHTTPMiddleware):
    """Middleware for correlation ID injection."""

    async def dispatch(self, request: Request, call_next):
        """
        Inject correlation ID into request context.

        The context is cleared once headers are ready; code that logs while a
        body streams captures the ID up front and passes it via ``extra``.

        Args:
            request: FastAPI request
            call_next: Next middleware in chain

        Returns:
            Response: Response with correlation ID header
        """
        correlation_id = set_correlation_id(request.headers.get(CORRELATION_HEADER))
        try:
            response: Response = await call_next(request)
        finally:
            clear_correlation_id()
        response.headers[CORRELATION_HEADER] = correlation_id
        return response
