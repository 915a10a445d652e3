"""Upstream chat model providers."""

from chat_relay.boundary.llm.base import CompletionProvider
from chat_relay.boundary.llm.gemini_provider import GeminiChatProvider

__all__ = ["CompletionProvider", "GeminiChatProvider"]
