"""
Stream relay.

Consumes a pending exchange, opens a streaming completion for it and relays
the chunks as server-sent event frames. The session entry is deleted exactly
once, whichever way the stream ends: exhausted, failed, or abandoned by a
disconnecting client.

Dependencies: chat_relay.core.session_store, chat_relay.boundary.llm
System role: GET /generate orchestration
"""

import logging
from collections.abc import AsyncGenerator, AsyncIterator, Awaitable, Callable

from chat_relay.boundary.llm.base import CompletionProvider
from chat_relay.core.exceptions import ProviderFailureError, SessionNotFoundError
from chat_relay.core.session_store import SessionStore
from chat_relay.models.streaming import encode_error_frame, encode_message_frame
from chat_relay.observability.correlation import get_correlation_id
from chat_relay.observability.log_utils import mask_session_id, safe_log_value

logger = logging.getLogger(__name__)

DisconnectProbe = Callable[[], Awaitable[bool]]

_EXHAUSTED = object()
_READY = b""


def _as_provider_failure(exc: BaseException) -> ProviderFailureError:
    if isinstance(exc, ProviderFailureError):
        return exc
    return ProviderFailureError(str(exc), code=type(exc).__name__)


async def _aclose(chunks: AsyncIterator[str]) -> None:
    aclose = getattr(chunks, "aclose", None)
    if aclose is not None:
        await aclose()


class SessionLease:
    """Deletes one store entry at most once."""

    def __init__(self, store: SessionStore, session_id: str) -> None:
        self._store = store
        self._session_id = session_id
        self._released = False

    @property
    def released(self) -> bool:
        return self._released

    def release(self) -> None:
        if self._released:
            return
        self._released = True
        self._store.delete(self._session_id)


class StreamRelay:
    """Relays a provider stream for a registered session."""

    def __init__(self, store: SessionStore, provider: CompletionProvider) -> None:
        """
        Initialize relay.

        Args:
            store: Pending exchange store
            provider: Completion provider to stream from
        """
        self.store = store
        self.provider = provider

    async def open(
        self,
        session_id: str | None,
        is_disconnected: DisconnectProbe | None = None,
    ) -> AsyncGenerator[bytes, None]:
        """
        Take the session and start its stream.

        The returned generator has already run up to the provider's first
        chunk, so a provider failing up front is reported as an ordinary error
        response rather than a broken stream. Closing the generator, iterated
        or not, deletes the session and closes the provider stream.

        Args:
            session_id: Session ID from POST /generate
            is_disconnected: Optional probe polled between chunks

        Returns:
            AsyncGenerator[bytes, None]: Encoded SSE frames

        Raises:
            SessionNotFoundError: If the ID is missing, unknown or already consumed
            ProviderFailureError: If the provider fails before producing its first chunk
        """
        if not session_id:
            raise SessionNotFoundError(session_id)

        frames = self._relay(session_id, is_disconnected, get_correlation_id() or "-")
        await anext(frames)
        return frames

    async def _relay(
        self,
        session_id: str,
        is_disconnected: DisconnectProbe | None,
        correlation_id: str,
    ) -> AsyncGenerator[bytes, None]:
        exchange = self.store.take_if_valid(session_id)
        lease = SessionLease(self.store, session_id)
        context = {"session_id": mask_session_id(session_id), "correlation_id": correlation_id}
        chunks: AsyncIterator[str] | None = None
        frame_count = 0
        try:
            logger.info("Session consumed", extra={**context, "history_len": len(exchange.history)})
            try:
                chunks = self.provider.stream_chat(exchange.history, exchange.new_message)
                first = await anext(chunks, _EXHAUSTED)
            except Exception as e:
                logger.error(
                    "Provider failed before streaming",
                    extra={**context, "error_type": type(e).__name__, "error_msg": safe_log_value(e)},
                )
                raise _as_provider_failure(e) from e

            # Primed: consumed by open() before any frame is sent
            yield _READY

            try:
                if first is not _EXHAUSTED:
                    yield encode_message_frame(first)
                    frame_count += 1
                    async for chunk in chunks:
                        if is_disconnected is not None and await is_disconnected():
                            logger.info("Client disconnected", extra={**context, "frames": frame_count})
                            break
                        yield encode_message_frame(chunk)
                        frame_count += 1
                logger.info("Stream completed", extra={**context, "frames": frame_count})
            except Exception as e:
                failure = _as_provider_failure(e)
                lease.release()
                logger.error(
                    "Stream failed",
                    extra={
                        **context,
                        "frames": frame_count,
                        "error_type": type(e).__name__,
                        "error_msg": safe_log_value(e),
                    },
                )
                yield encode_error_frame(failure.code)
        finally:
            lease.release()
            if chunks is not None:
                await _aclose(chunks)
