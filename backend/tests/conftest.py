"""Centralized fixtures and mocks for testing.

Provides deterministic fakes for the external services (embeddings, Redis,
Qdrant, Ollama) and factory fixtures for common test data.
"""

import hashlib

import pytest
from langchain_core.messages import AIMessageChunk

from newschat.config import Settings
from newschat.core import PersistenceError, VectorStoreError
from newschat.models import ContextChunk, ConversationTurn, SessionLookup
from newschat.rag import EmbeddingIntent
from newschat.services import ChatPipeline, GenerationService

# ============================================================================
# Mock Classes for External Services
# ============================================================================


class MockEmbeddingService:
    """Embedding service that returns deterministic vectors.

    Uses text hashing to produce reproducible embeddings for the same input.
    """

    def __init__(self, dimension: int = 16):
        self._dimension = dimension
        self.calls: list[tuple[str, EmbeddingIntent]] = []
        self.error: Exception | None = None

    def _hash_to_embedding(self, text: str) -> list[float]:
        hash_bytes = hashlib.sha256(text.encode()).digest()
        return [(hash_bytes[i % len(hash_bytes)] - 128) / 128.0 for i in range(self._dimension)]

    async def embed(
        self,
        text: str,
        intent: EmbeddingIntent = EmbeddingIntent.PASSAGE,
    ) -> list[float]:
        if not text or not text.strip():
            return []
        self.calls.append((text, intent))
        if self.error:
            raise self.error
        return self._hash_to_embedding(text)

    async def close(self) -> None:
        pass


class InMemorySessionStore:
    """Session store keeping histories in a dict, recording every write."""

    def __init__(self):
        self.sessions: dict[str, list[ConversationTurn]] = {}
        self.writes: list[tuple[str, list[ConversationTurn], int | None]] = []
        self.unavailable = False
        self.fail_writes = False

    async def get(self, session_id: str) -> SessionLookup:
        if self.unavailable:
            return SessionLookup.unavailable()
        if session_id not in self.sessions:
            return SessionLookup.not_found()
        return SessionLookup.found(list(self.sessions[session_id]))

    async def save(
        self,
        session_id: str,
        turns: list[ConversationTurn],
        ttl_seconds: int | None = None,
    ) -> None:
        if self.fail_writes:
            raise PersistenceError("Redis is down", session_id)
        self.writes.append((session_id, list(turns), ttl_seconds))
        self.sessions[session_id] = list(turns)

    async def ping(self) -> bool:
        return not self.unavailable

    async def close(self) -> None:
        pass


class MockVectorStore:
    """Vector store returning a canned result list."""

    collection_name = "test_news"

    def __init__(self, chunks: list[ContextChunk] | None = None):
        self.chunks = chunks or []
        self.searches: list[tuple[list[float], int | None]] = []
        self.upserts: list = []
        self.resets = 0
        self.fail = False

    async def search(self, vector: list[float], top_k: int | None = None) -> list[ContextChunk]:
        self.searches.append((vector, top_k))
        if self.fail:
            raise VectorStoreError("Qdrant is down")
        return self.chunks[: top_k or len(self.chunks)]

    async def upsert(self, records) -> int:
        if self.fail:
            raise VectorStoreError("Qdrant is down")
        stored = [r for r in records if r.vector]
        self.upserts.extend(stored)
        return len(stored)

    async def reset_collection(self) -> None:
        self.resets += 1

    async def get_stats(self) -> dict:
        if self.fail:
            raise VectorStoreError("Qdrant is down")
        return {"collection": self.collection_name, "points_count": len(self.upserts), "status": "green"}

    async def close(self) -> None:
        pass


class MockChatOllama:
    """Mock LLM that streams scripted fragments."""

    def __init__(self, fragments: list[str] | None = None):
        self.fragments = fragments if fragments is not None else ["The election ", "was held ", "on Sunday."]
        self.prompts: list[str] = []
        self.fail_before_first = False
        self.fail_after: int | None = None
        self.closed_early = False
        self.completed = False

    async def astream(self, prompt: str):
        self.prompts.append(prompt)
        if self.fail_before_first:
            raise ConnectionError("Ollama is not running")
        try:
            for i, fragment in enumerate(self.fragments):
                if self.fail_after is not None and i == self.fail_after:
                    raise RuntimeError("stream interrupted")
                yield AIMessageChunk(content=fragment)
        except GeneratorExit:
            self.closed_early = True
            raise
        self.completed = True


# ============================================================================
# Configuration Fixtures
# ============================================================================


@pytest.fixture
def mock_settings() -> Settings:
    """Create test settings."""
    return Settings(
        embedding_provider="ollama",
        jina_api_key="test-jina-key",
        news_api_key="test-news-key",
        generation_model="llama3.2",
        collection_name="test_news",
        vector_size=16,
        top_k_retrieval=3,
        session_ttl_seconds=3600,
        chunk_size=100,
        chunk_overlap=20,
        log_level="WARNING",
    )


# ============================================================================
# Service Fixtures
# ============================================================================


@pytest.fixture
def mock_embedding_service() -> MockEmbeddingService:
    return MockEmbeddingService()


@pytest.fixture
def session_store() -> InMemorySessionStore:
    return InMemorySessionStore()


@pytest.fixture
def sample_chunks() -> list[ContextChunk]:
    """Three retrieved chunks, two of them from the same article."""
    return [
        ContextChunk(
            text="Voters went to the polls on Sunday in a closely watched election.",
            source_url="https://news.example.com/election",
            score=0.91,
        ),
        ContextChunk(
            text="Turnout reached a record high according to officials.",
            source_url="https://news.example.com/turnout",
            score=0.84,
        ),
        ContextChunk(
            text="The incumbent conceded late on Sunday evening.",
            source_url="https://news.example.com/election",
            score=0.79,
        ),
    ]


@pytest.fixture
def vector_store(sample_chunks) -> MockVectorStore:
    return MockVectorStore(sample_chunks)


@pytest.fixture
def mock_llm() -> MockChatOllama:
    return MockChatOllama()


@pytest.fixture
def pipeline(
    mock_settings,
    session_store,
    mock_embedding_service,
    vector_store,
    mock_llm,
) -> ChatPipeline:
    """Chat pipeline wired to in-memory fakes."""
    return ChatPipeline(
        session_store=session_store,
        embedding_service=mock_embedding_service,
        vector_store=vector_store,
        generation_service=GenerationService(mock_settings, llm=mock_llm),
        settings=mock_settings,
    )


@pytest.fixture
def collect_events():
    """Drain a pipeline stream into a list of events."""

    async def _collect(pipeline, exchange, is_disconnected=None) -> list:
        return [event async for event in pipeline.stream(exchange, is_disconnected)]

    return _collect
