"""
Test suite for StreamRelay.

Tests framing, provider invocation, exactly-once cleanup on every terminal
path, and error surfacing before and after the first byte. Uses the fake
provider from conftest, no network.

System role: Verification of GET /generate orchestration
"""

import asyncio
import json
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from chat_relay.application.services.stream_relay import SessionLease, StreamRelay
from chat_relay.core.exceptions import ProviderFailureError, SessionNotFoundError
from chat_relay.core.session_store import SessionStore
from chat_relay.models.generate import ConversationMessage, MessagePart
from chat_relay.observability.correlation import clear_correlation_id, set_correlation_id
from tests.conftest import FakeProvider


async def collect(frames) -> list[bytes]:
    return [frame async for frame in frames]


def decode_data(frame: bytes) -> dict:
    text = frame.decode("utf-8")
    assert text.endswith("\n\n")
    data_line = [line for line in text.strip().split("\n") if line.startswith("data: ")][0]
    return json.loads(data_line[len("data: "):])


class CancelledOnCloseProvider:
    """Provider whose stream is cancelled while being closed."""

    async def stream_chat(self, history, new_message):
        try:
            yield "a"
            yield "b"
        finally:
            raise asyncio.CancelledError()


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


class TestStreamRelaySuccess:
    """Test suite for streams that run to completion."""

    @pytest.mark.asyncio
    async def test_frames_should_carry_chunks_in_order(self, store: SessionStore) -> None:
        # Arrange
        provider = FakeProvider(chunks=["Hel", "lo", " 🌍"])
        session_id = store.create([], "hi")
        relay = StreamRelay(store=store, provider=provider)

        # Act
        frames = await collect(await relay.open(session_id))

        # Assert
        assert [decode_data(frame) for frame in frames] == [
            {"message": "Hel"},
            {"message": "lo"},
            {"message": " 🌍"},
        ]
        assert all(frame.startswith(b"data: ") for frame in frames)

    @pytest.mark.asyncio
    async def test_provider_should_receive_history_and_new_message(self, store: SessionStore) -> None:
        history = (ConversationMessage(role="model", parts=(MessagePart(text="earlier"),)),)
        provider = FakeProvider()
        session_id = store.create(history, "ab")

        await collect(await StreamRelay(store, provider).open(session_id))

        assert provider.calls == [(history, "ab")]

    @pytest.mark.asyncio
    async def test_completed_stream_should_delete_session(self, store: SessionStore) -> None:
        session_id = store.create([], "hi")
        relay = StreamRelay(store, FakeProvider())

        await collect(await relay.open(session_id))

        assert session_id not in store
        with pytest.raises(SessionNotFoundError):
            await relay.open(session_id)

    @pytest.mark.asyncio
    async def test_empty_provider_stream_should_yield_nothing_and_cleanup(self, store: SessionStore) -> None:
        session_id = store.create([], "hi")

        frames = await collect(await StreamRelay(store, FakeProvider(chunks=[])).open(session_id))

        assert frames == []
        assert session_id not in store

    @pytest.mark.asyncio
    async def test_session_should_stay_consumed_while_streaming(self, store: SessionStore) -> None:
        session_id = store.create([], "hi")
        relay = StreamRelay(store, FakeProvider())

        frames = await relay.open(session_id)

        assert session_id in store
        with pytest.raises(SessionNotFoundError):
            await relay.open(session_id)
        await collect(frames)
        assert session_id not in store


class TestStreamRelayNotFound:
    """Test suite for unknown sessions."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize("session_id", [None, "", "never-issued"])
    async def test_unknown_session_should_raise_not_found(self, store: SessionStore, session_id) -> None:
        provider = FakeProvider()

        with pytest.raises(SessionNotFoundError):
            await StreamRelay(store, provider).open(session_id)

        assert provider.calls == []


class TestStreamRelayFailures:
    """Test suite for provider failures."""

    @pytest.mark.asyncio
    async def test_failure_before_first_chunk_should_raise_and_cleanup(self, store: SessionStore) -> None:
        session_id = store.create([], "hi")
        provider = FakeProvider(fail_after=0, error=ConnectionError("refused"))

        with pytest.raises(ProviderFailureError) as exc_info:
            await StreamRelay(store, provider).open(session_id)

        assert exc_info.value.code == "ConnectionError"
        assert exc_info.value.to_payload() == {"error": {"code": "ConnectionError"}}
        assert session_id not in store

    @pytest.mark.asyncio
    async def test_provider_failure_code_should_pass_through(self, store: SessionStore) -> None:
        session_id = store.create([], "hi")
        provider = FakeProvider(fail_after=0, error=ProviderFailureError("quota", code="ResourceExhausted"))

        with pytest.raises(ProviderFailureError) as exc_info:
            await StreamRelay(store, provider).open(session_id)

        assert exc_info.value.code == "ResourceExhausted"

    @pytest.mark.asyncio
    async def test_failure_mid_stream_should_emit_error_event_and_cleanup(self, store: SessionStore) -> None:
        session_id = store.create([], "hi")
        provider = FakeProvider(chunks=["one", "two", "three"], fail_after=2, error=TimeoutError("slow"))

        frames = await collect(await StreamRelay(store, provider).open(session_id))

        assert [decode_data(frame) for frame in frames[:2]] == [{"message": "one"}, {"message": "two"}]
        assert frames[2].startswith(b"event: error\n")
        assert decode_data(frames[2]) == {"error": {"code": "TimeoutError"}}
        assert len(frames) == 3
        assert session_id not in store

    @pytest.mark.asyncio
    async def test_failure_should_delete_exactly_once(self) -> None:
        store = MagicMock(spec=SessionStore)
        store.take_if_valid.return_value = MagicMock(history=(), new_message="hi")
        provider = FakeProvider(chunks=["one", "two"], fail_after=1)

        await collect(await StreamRelay(store, provider).open("sid"))

        store.delete.assert_called_once_with("sid")

    @pytest.mark.asyncio
    async def test_success_should_delete_exactly_once(self) -> None:
        store = MagicMock(spec=SessionStore)
        store.take_if_valid.return_value = MagicMock(history=(), new_message="hi")

        await collect(await StreamRelay(store, FakeProvider()).open("sid"))

        store.delete.assert_called_once_with("sid")


class TestStreamRelayCancellation:
    """Test suite for clients that go away mid-stream."""

    @pytest.mark.asyncio
    async def test_disconnect_should_stop_pulling_and_cleanup(self, store: SessionStore) -> None:
        session_id = store.create([], "hi")
        provider = FakeProvider(chunks=["a", "b", "c", "d"])
        is_disconnected = AsyncMock(side_effect=[False, True])

        frames = await collect(await StreamRelay(store, provider).open(session_id, is_disconnected=is_disconnected))

        assert [decode_data(frame)["message"] for frame in frames] == ["a", "b"]
        assert provider.yielded == 3
        assert provider.closed is True
        assert session_id not in store

    @pytest.mark.asyncio
    async def test_abandoned_generator_should_cleanup_on_close(self, store: SessionStore) -> None:
        session_id = store.create([], "hi")
        provider = FakeProvider(chunks=["a", "b", "c"])

        frames = await StreamRelay(store, provider).open(session_id)
        first = await anext(frames)
        await frames.aclose()

        assert decode_data(first) == {"message": "a"}
        assert provider.closed is True
        assert session_id not in store

    @pytest.mark.asyncio
    async def test_unstarted_stream_should_cleanup_on_close(self, store: SessionStore) -> None:
        # Arrange
        session_id = store.create([], "hi")
        provider = FakeProvider(chunks=["a", "b"])
        frames = await StreamRelay(store, provider).open(session_id)

        # Act
        await frames.aclose()

        # Assert
        assert session_id not in store
        assert provider.closed is True

    @pytest.mark.asyncio
    async def test_session_should_be_deleted_even_if_provider_close_is_cancelled(self, store: SessionStore) -> None:
        session_id = store.create([], "hi")
        frames = await StreamRelay(store, CancelledOnCloseProvider()).open(session_id)

        with pytest.raises(asyncio.CancelledError):
            await frames.aclose()

        assert session_id not in store

    @pytest.mark.asyncio
    async def test_logs_should_keep_correlation_id_after_request_context_cleared(
        self, store: SessionStore, caplog
    ) -> None:
        session_id = store.create([], "hi")
        set_correlation_id("req-7")
        frames = await StreamRelay(store, FakeProvider()).open(session_id)
        clear_correlation_id()

        with caplog.at_level(logging.INFO, logger="chat_relay.application.services.stream_relay"):
            caplog.clear()
            await collect(frames)

        records = [record for record in caplog.records if record.name == "chat_relay.application.services.stream_relay"]
        assert [record.getMessage() for record in records] == ["Stream completed"]
        assert records[0].correlation_id == "req-7"
        assert records[0].frames == 3


class TestSessionLease:
    def test_release_should_delete_once(self) -> None:
        store = MagicMock(spec=SessionStore)
        lease = SessionLease(store, "sid")

        lease.release()
        lease.release()

        assert lease.released is True
        store.delete.assert_called_once_with("sid")
