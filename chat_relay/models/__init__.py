"""API and streaming schemas."""

from chat_relay.models.generate import (
    ConversationMessage,
    GenerateRequest,
    GenerateResponse,
    MessagePart,
)

__all__ = [
    "ConversationMessage",
    "GenerateRequest",
    "GenerateResponse",
    "MessagePart",
]
