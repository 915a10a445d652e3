"""
Shared test fixtures and configuration for entire test suite.

Provides: fake completion provider, settings builders, app and client fixtures
Dependencies: pytest, fastapi
System role: Test infrastructure and fixture management
"""

from collections.abc import AsyncGenerator, Sequence

import pytest
from fastapi.testclient import TestClient

from chat_relay.api.main import create_app
from chat_relay.configs import GeminiSettings, SecuritySettings, SessionSettings, Settings
from chat_relay.core.session_store import SessionStore
from chat_relay.models.generate import ConversationMessage


class FakeProvider:
    """
    Completion provider double.

    Records every call and replays ``chunks``. When ``fail_after`` is set the
    stream raises ``error`` once that many chunks have been yielded.
    """

    def __init__(
        self,
        chunks: Sequence[str] = ("Hello", ", ", "world"),
        fail_after: int | None = None,
        error: Exception | None = None,
    ) -> None:
        self.chunks = list(chunks)
        self.fail_after = fail_after
        self.error = error or RuntimeError("upstream exploded")
        self.calls: list[tuple[tuple[ConversationMessage, ...], str]] = []
        self.closed = False
        self.yielded = 0

    async def stream_chat(
        self,
        history: Sequence[ConversationMessage],
        new_message: str,
    ) -> AsyncGenerator[str, None]:
        self.calls.append((tuple(history), new_message))
        try:
            for index, chunk in enumerate(self.chunks):
                if self.fail_after is not None and index >= self.fail_after:
                    raise self.error
                self.yielded += 1
                yield chunk
            if self.fail_after is not None and self.fail_after >= len(self.chunks):
                raise self.error
        finally:
            self.closed = True


def make_settings(
    environment: str = "development",
    site_password: str = "",
    secret_key: str = "test-secret",
    ttl_seconds: float = 0,
) -> Settings:
    """Build settings without reading the environment."""
    return Settings(
        environment=environment,
        security=SecuritySettings(site_password=site_password, public_secret_key=secret_key),
        gemini=GeminiSettings(api_key="test-key"),
        session=SessionSettings(ttl_seconds=ttl_seconds),
    )


def user_message(*texts: str) -> dict:
    return {"role": "user", "parts": [{"text": text} for text in texts]}


def model_message(*texts: str) -> dict:
    return {"role": "model", "parts": [{"text": text} for text in texts]}


@pytest.fixture
def fake_provider() -> FakeProvider:
    """Provide a provider streaming three chunks."""
    return FakeProvider()


@pytest.fixture
def settings() -> Settings:
    """Provide development settings with no password."""
    return make_settings()


@pytest.fixture
def app(settings: Settings, fake_provider: FakeProvider):
    """Create application wired to the fake provider."""
    return create_app(settings=settings, provider=fake_provider)


@pytest.fixture
def client(app) -> TestClient:
    """Provide TestClient for the app, with lifespan running."""
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def store(app) -> SessionStore:
    """The app's session store."""
    return app.state.session_store
