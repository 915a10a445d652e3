"""API-specific dependencies."""

from .dependencies import (
    get_completion_provider,
    get_request_validator,
    get_session_service,
    get_session_store,
    get_settings_dependency,
    get_stream_relay,
)

__all__ = [
    "get_completion_provider",
    "get_request_validator",
    "get_session_service",
    "get_session_store",
    "get_settings_dependency",
    "get_stream_relay",
]
