"""
Gemini completion provider.

Streams chat completions from Google Gemini through LangChain's
ChatGoogleGenerativeAI. The model client is built on first use so the app can
start without credentials.

Dependencies: langchain_google_genai, langchain_core
System role: Upstream chat model boundary
"""

import logging
from collections.abc import AsyncGenerator, Sequence
from typing import Any

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, SystemMessage
from langchain_google_genai import ChatGoogleGenerativeAI

from chat_relay.configs.gemini import GeminiSettings
from chat_relay.core.exceptions import ProviderFailureError
from chat_relay.models.generate import USER_ROLE, ConversationMessage
from chat_relay.observability.log_utils import safe_log_value

logger = logging.getLogger(__name__)

MODEL_ROLES = frozenset({"model", "assistant", "ai"})
SYSTEM_ROLE = "system"


def to_langchain_message(message: ConversationMessage) -> BaseMessage:
    """Map a conversation turn onto the matching LangChain message type."""
    role = message.role.lower()
    if role == USER_ROLE:
        return HumanMessage(content=message.text)
    if role in MODEL_ROLES:
        return AIMessage(content=message.text)
    if role == SYSTEM_ROLE:
        return SystemMessage(content=message.text)
    raise ValueError(f"Unsupported message role: {message.role}")


def chunk_text(content: Any) -> str:
    """Flatten chunk content, which Gemini may deliver as a list of parts."""
    if isinstance(content, list):
        return "".join(
            item if isinstance(item, str) else (item.get("text", "") if isinstance(item, dict) else str(item))
            for item in content
        )
    return "" if content is None else str(content)


class GeminiChatProvider:
    """Completion provider backed by a Gemini chat model."""

    def __init__(
        self,
        model_id: str = "gemini-2.0-flash",
        api_key: str | None = None,
        temperature: float = 0.7,
        max_output_tokens: int = 8000,
        model: BaseChatModel | None = None,
    ) -> None:
        """
        Initialize provider.

        Args:
            model_id: Gemini model identifier
            api_key: Google AI API key (None lets the client read GOOGLE_API_KEY)
            temperature: Sampling temperature
            max_output_tokens: Generation cap per response
            model: Pre-built chat model, mainly for tests
        """
        self._model_id = model_id
        self._api_key = api_key
        self._temperature = temperature
        self._max_output_tokens = max_output_tokens
        self._model = model

    @classmethod
    def from_settings(cls, settings: GeminiSettings) -> "GeminiChatProvider":
        return cls(
            model_id=settings.model_name,
            api_key=settings.api_key,
            temperature=settings.temperature,
            max_output_tokens=settings.max_output_tokens,
        )

    @property
    def model(self) -> BaseChatModel:
        """Get the chat model, building it on first access."""
        if self._model is None:
            kwargs: dict[str, Any] = {
                "model": self._model_id,
                "temperature": self._temperature,
                "max_output_tokens": self._max_output_tokens,
            }
            if self._api_key:
                kwargs["google_api_key"] = self._api_key
            self._model = ChatGoogleGenerativeAI(**kwargs)
        return self._model

    async def stream_chat(
        self,
        history: Sequence[ConversationMessage],
        new_message: str,
    ) -> AsyncGenerator[str, None]:
        """
        Stream the model's reply to ``new_message`` given ``history``.

        Yields:
            str: Non-empty text chunks in emission order

        Raises:
            ProviderFailureError: On any upstream or client construction failure
        """
        chunk_count = 0
        try:
            messages = [to_langchain_message(message) for message in history]
            messages.append(HumanMessage(content=new_message))
            logger.info(
                f"{__name__}:stream_chat - Starting LLM stream (model={self._model_id}, messages={len(messages)})"
            )
            async for chunk in self.model.astream(messages):
                text = chunk_text(chunk.content)
                if text:
                    chunk_count += 1
                    yield text
        except ProviderFailureError:
            raise
        except Exception as e:
            logger.error(f"{__name__}:stream_chat - LLM streaming failed after {chunk_count} chunks: {safe_log_value(e)}")
            raise ProviderFailureError(str(e), code=type(e).__name__) from e

        logger.info(f"{__name__}:stream_chat - LLM stream finished, chunks={chunk_count}")
