"""Application services."""

from chat_relay.application.services.session_service import SessionService
from chat_relay.application.services.stream_relay import StreamRelay

__all__ = ["SessionService", "StreamRelay"]
