"""
Dependency injection container.

Factory functions for FastAPI dependencies. Shared objects live on the
application instance (``app.state``) and are set up in ``create_app``.

Dependencies: chat_relay.configs, chat_relay.application, chat_relay.core
System role: DI container for service injection
"""

from fastapi import Depends, Request

from chat_relay.application.services import SessionService, StreamRelay
from chat_relay.boundary.llm.base import CompletionProvider
from chat_relay.configs import Settings
from chat_relay.core.request_validator import RequestValidator
from chat_relay.core.session_store import SessionStore
from chat_relay.core.signature import Sha256SignatureVerifier


def get_settings_dependency(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings


def get_session_store(request: Request) -> SessionStore:
    """Get the application's session store."""
    return request.app.state.session_store


def get_completion_provider(request: Request) -> CompletionProvider:
    """Get the application's completion provider."""
    return request.app.state.completion_provider


def get_request_validator(
    settings: Settings = Depends(get_settings_dependency),
) -> RequestValidator:
    """
    Build the request validator from current settings.

    Signatures are only enforced in production.

    Args:
        settings: Application settings (injected)

    Returns:
        RequestValidator: Validator for POST /generate
    """
    security = settings.security
    return RequestValidator(
        site_password=security.site_password,
        enforce_signature=settings.is_production,
        signature_verifier=Sha256SignatureVerifier(
            secret_key=security.public_secret_key,
            max_age_seconds=security.signature_max_age_seconds,
        ),
    )


def get_session_service(
    store: SessionStore = Depends(get_session_store),
    validator: RequestValidator = Depends(get_request_validator),
) -> SessionService:
    """Get session registration service."""
    return SessionService(store=store, validator=validator)


def get_stream_relay(
    store: SessionStore = Depends(get_session_store),
    provider: CompletionProvider = Depends(get_completion_provider),
) -> StreamRelay:
    """Get stream relay."""
    return StreamRelay(store=store, provider=provider)
