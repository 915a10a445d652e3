"""
Completion provider interface.

Dependencies: typing
System role: Boundary contract for upstream chat models
"""

from collections.abc import AsyncIterator, Sequence
from typing import Protocol

from chat_relay.models.generate import ConversationMessage


class CompletionProvider(Protocol):
    """Anything that turns a conversation into a stream of text chunks."""

    def stream_chat(
        self,
        history: Sequence[ConversationMessage],
        new_message: str,
    ) -> AsyncIterator[str]:
        """
        Start a streaming completion.

        Args:
            history: Prior turns, oldest first
            new_message: Newest user message text

        Returns:
            AsyncIterator[str]: Lazy, finite sequence of text chunks. May raise at any point
        """
        ...
