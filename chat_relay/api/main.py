"""
FastAPI application with assembled routers.

Initializes FastAPI app with the generate and health routers and configures
uvicorn server.

Dependencies: fastapi, chat_relay.api.routers, uvicorn
System role: API entry point with router assembly and server launch
"""

import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from chat_relay.api.error_handlers import register_exception_handlers
from chat_relay.boundary.llm import CompletionProvider, GeminiChatProvider
from chat_relay.configs import Settings, get_settings
from chat_relay.core.session_store import SessionStore
from chat_relay.observability import (
    CorrelationMiddleware,
    RequestLoggingMiddleware,
    configure_logging,
)
from .routers import generate_router, health_router


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan context manager.

    Handles startup and shutdown events.
    """
    logger = logging.getLogger("uvicorn")

    # Startup
    purged = app.state.session_store.purge_expired()
    logger.info(f"Session store ready (purged={purged})")

    yield

    # Shutdown
    pending = len(app.state.session_store)
    app.state.session_store.clear()
    logger.info(f"Session store cleared ({pending} pending exchanges dropped)")


def create_app(
    settings: Settings | None = None,
    provider: CompletionProvider | None = None,
) -> FastAPI:
    """
    Create and configure FastAPI application with routers.

    Args:
        settings: Settings to build from (defaults to the environment)
        provider: Completion provider (defaults to Gemini)

    Returns:
        FastAPI: Configured application instance with all routers registered
    """
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    app = FastAPI(
        title="Chat Relay API",
        description="Two-phase session broker streaming chat completions over SSE",
        version="0.1.0",
        debug=settings.debug,
        lifespan=lifespan,
    )

    app.state.settings = settings
    app.state.session_store = SessionStore(ttl_seconds=settings.session.ttl_seconds)
    app.state.completion_provider = provider or GeminiChatProvider.from_settings(settings.gemini)

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Add observability middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(CorrelationMiddleware)

    register_exception_handlers(app)

    app.include_router(health_router)
    app.include_router(generate_router)

    return app


def run() -> None:
    """Serve the API with uvicorn."""
    uvicorn.run(
        "chat_relay.api.main:create_app",
        factory=True,
        host="0.0.0.0",
        port=8000,
    )


if __name__ == "__main__":
    run()
