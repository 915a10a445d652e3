"""
In-memory pending exchange store.

Holds the conversation registered by POST /generate until the matching
GET /generate consumes it. An entry moves through three states:

    CREATED  -> registered, waiting for its stream
    CONSUMED -> handed to exactly one stream, still present while it runs
    (gone)   -> deleted by the stream on completion or failure

All operations are synchronous and guarded by one lock, so they never
interleave with each other regardless of which thread or task calls them.

Dependencies: secrets, threading (stdlib)
System role: Session broker state
"""

import logging
import secrets
import threading
import time
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from enum import Enum

from chat_relay.core.exceptions import SessionNotFoundError
from chat_relay.models.generate import ConversationMessage
from chat_relay.observability.log_utils import mask_session_id

logger = logging.getLogger(__name__)

SESSION_ID_BYTES = 32


def new_session_id() -> str:
    """256 bits from the OS CSPRNG, URL-safe."""
    return secrets.token_urlsafe(SESSION_ID_BYTES)


@dataclass(frozen=True)
class PendingExchange:
    """
    Conversation waiting to be streamed.

    Attributes:
        history: Messages preceding the newest one, oldest first
        new_message: Text of the newest user message
    """

    history: tuple[ConversationMessage, ...]
    new_message: str


class SessionState(str, Enum):
    CREATED = "created"
    CONSUMED = "consumed"


@dataclass
class _Entry:
    exchange: PendingExchange
    created_at: float
    state: SessionState = SessionState.CREATED


class SessionStore:
    """Process-local map from session ID to pending exchange."""

    def __init__(
        self,
        ttl_seconds: float = 0,
        clock: Callable[[], float] = time.monotonic,
        id_factory: Callable[[], str] = new_session_id,
    ) -> None:
        """
        Initialize an empty store.

        Args:
            ttl_seconds: Unconsumed entries older than this are evicted lazily. 0 disables expiry
            clock: Monotonic time source
            id_factory: Session ID generator
        """
        self._ttl_seconds = ttl_seconds
        self._clock = clock
        self._id_factory = id_factory
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._entries

    def create(self, history: Sequence[ConversationMessage], new_message: str) -> str:
        """
        Register a pending exchange under a fresh session ID.

        Args:
            history: Messages before the newest one
            new_message: Text of the newest user message

        Returns:
            str: New session ID, unique among live entries
        """
        exchange = PendingExchange(history=tuple(history), new_message=new_message)
        with self._lock:
            self._purge_expired_locked()
            session_id = self._id_factory()
            while session_id in self._entries:
                session_id = self._id_factory()
            self._entries[session_id] = _Entry(exchange=exchange, created_at=self._clock())

        logger.info(
            "Pending exchange registered",
            extra={
                "session_id": mask_session_id(session_id),
                "history_length": len(exchange.history),
            },
        )
        return session_id

    def take_if_valid(self, session_id: str | None) -> PendingExchange:
        """
        Hand out a pending exchange to its single consumer.

        The entry stays in the store, marked consumed, until ``delete`` is called.

        Args:
            session_id: ID returned by ``create``

        Returns:
            PendingExchange: The registered exchange

        Raises:
            SessionNotFoundError: If the ID is unknown, expired or already consumed
        """
        with self._lock:
            entry = self._entries.get(session_id) if session_id else None
            if entry is not None and entry.state is SessionState.CREATED and self._is_expired(entry):
                del self._entries[session_id]
                logger.info("Pending exchange expired", extra={"session_id": mask_session_id(session_id)})
                entry = None
            if entry is None or entry.state is not SessionState.CREATED:
                raise SessionNotFoundError(session_id)
            entry.state = SessionState.CONSUMED
            return entry.exchange

    def delete(self, session_id: str) -> bool:
        """
        Remove an entry. Safe to call for IDs that are already gone.

        Returns:
            bool: True if this call removed the entry
        """
        with self._lock:
            removed = self._entries.pop(session_id, None) is not None
        if removed:
            logger.debug("Pending exchange deleted", extra={"session_id": mask_session_id(session_id)})
        return removed

    def purge_expired(self) -> int:
        """Evict every expired unconsumed entry and return how many were removed."""
        with self._lock:
            return self._purge_expired_locked()

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def _is_expired(self, entry: _Entry) -> bool:
        if self._ttl_seconds <= 0:
            return False
        return self._clock() - entry.created_at > self._ttl_seconds

    def _purge_expired_locked(self) -> int:
        if self._ttl_seconds <= 0:
            return 0
        expired = [
            sid for sid, entry in self._entries.items()
            if entry.state is SessionState.CREATED and self._is_expired(entry)
        ]
        for sid in expired:
            del self._entries[sid]
        if expired:
            logger.info("Expired pending exchanges purged", extra={"purged": len(expired)})
        return len(expired)
