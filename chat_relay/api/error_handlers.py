"""
Exception handlers.

Translate domain exceptions into the ``{"error": {...}}`` envelope clients expect.

Dependencies: fastapi
System role: HTTP error mapping
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from chat_relay.core.exceptions import ChatRelayException, InvalidHistoryError

logger = logging.getLogger(__name__)


async def handle_chat_relay_exception(request: Request, exc: ChatRelayException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{request.method} {request.url.path} - {exc.error_kind}",
        extra={"error_kind": exc.error_kind, "status_code": exc.status_code},
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_payload())


async def handle_request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies are reported as an invalid message history."""
    logger.warning(
        f"{request.method} {request.url.path} - malformed request",
        extra={"error_count": len(exc.errors())},
    )
    error = InvalidHistoryError()
    return JSONResponse(status_code=error.status_code, content=error.to_payload())


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ChatRelayException, handle_chat_relay_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
