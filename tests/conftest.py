"""Shared test fixtures and fakes."""

from __future__ import annotations

import tempfile
from pathlib import Path

import pytest

from helpdesk_kb.config.settings import Settings
from helpdesk_kb.exceptions import CitationResolutionFailed, EmbeddingUnavailable, ModelUnavailable
from helpdesk_kb.generation.messages import ModelMessage
from helpdesk_kb.models.domain import ChatMessage
from helpdesk_kb.storage.sqlite_citation_store import SQLiteCitationStore
from helpdesk_kb.storage.sqlite_question_store import SQLiteQuestionStore


class FakeChatModel:
    """Replays scripted replies and records every request it receives."""

    def __init__(self, replies: list[ModelMessage | Exception]) -> None:
        self._replies = list(replies)
        self.calls: list[dict] = []

    def script(self, *replies: ModelMessage | Exception) -> None:
        self._replies.extend(replies)

    @property
    def call_count(self) -> int:
        return len(self.calls)

    async def complete(self, messages, response_format=None, tools=None) -> ModelMessage:
        self.calls.append(
            {"messages": list(messages), "response_format": response_format, "tools": tools}
        )
        if not self._replies:
            raise ModelUnavailable("script exhausted")
        reply = self._replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return reply


class FakeEmbedder:
    """Maps known texts to fixed vectors; unknown texts get `default`."""

    def __init__(
        self,
        vectors: dict[str, list[float]] | None = None,
        default: list[float] | None = None,
        fail_on: set[str] | None = None,
    ) -> None:
        self._vectors = vectors or {}
        self._default = default or [1.0, 0.0, 0.0]
        self._fail_on = fail_on or set()
        self.calls: list[str] = []

    @property
    def dimensions(self) -> int:
        return len(self._default)

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if text in self._fail_on:
            raise EmbeddingUnavailable(f"cannot embed {text!r}")
        return list(self._vectors.get(text, self._default))


class FakeChatPlatform:
    def __init__(
        self,
        users: dict[str, str] | None = None,
        failing_ts: set[str] | None = None,
        threads: dict[str, list[ChatMessage]] | None = None,
    ) -> None:
        self._users = users or {}
        self._failing_ts = failing_ts or set()
        self._threads = threads or {}
        self.posted: list[dict] = []

    async def resolve_permalink(self, channel_id: str, message_ts: str) -> str:
        if message_ts in self._failing_ts:
            raise CitationResolutionFailed(f"no permalink for {message_ts}")
        return f"https://example.slack.com/archives/{channel_id}/p{message_ts.replace('.', '')}"

    async def lookup_user(self, user_id: str) -> str:
        return self._users.get(user_id, user_id)

    async def post_message(
        self, channel_id: str, thread_ts: str, text: str, blocks: list[dict]
    ) -> None:
        self.posted.append(
            {"channel_id": channel_id, "thread_ts": thread_ts, "text": text, "blocks": blocks}
        )

    async def fetch_thread(self, channel_id: str, thread_ts: str) -> list[ChatMessage]:
        return list(self._threads.get(thread_ts, []))


@pytest.fixture
def tmp_dir():
    """Create a temporary directory."""
    return tempfile.mkdtemp()


@pytest.fixture
def settings(tmp_dir):
    """Test settings with temp paths."""
    return Settings(
        llm_api_key="test-key",
        google_api_key="test-key",
        sqlite_db_path=str(Path(tmp_dir) / "test_helpdesk.db"),
        embedding_cache_db_path=str(Path(tmp_dir) / "test_cache.db"),
        embedding_dimensions=3,
        api_keys="test-api-key",
        jwt_secret="test-secret",
    )


@pytest.fixture
async def citation_store(settings):
    store = SQLiteCitationStore(settings.sqlite_db_path)
    await store.initialize()
    return store


@pytest.fixture
async def question_store(settings):
    store = SQLiteQuestionStore(settings.sqlite_db_path)
    await store.initialize()
    return store


@pytest.fixture
def resolved_thread():
    return [
        ChatMessage(user="U_ALICE", text="How do I reset my password?", ts="1719238400.000100"),
        ChatMessage(user="U_BOB", text="Go to Settings > Security.", ts="1719238460.000200"),
    ]
