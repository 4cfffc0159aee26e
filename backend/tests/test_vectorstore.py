"""Tests for the Qdrant vector store."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from qdrant_client.http import models

from newschat.core import VectorStoreError
from newschat.models import ContextChunk, IndexRecord
from newschat.rag.vectorstore import VectorStore


@pytest.fixture
def qdrant_client() -> MagicMock:
    client = MagicMock()
    client.query_points = AsyncMock(return_value=models.QueryResponse(points=[]))
    client.upsert = AsyncMock()
    client.collection_exists = AsyncMock(return_value=True)
    client.delete_collection = AsyncMock()
    client.create_collection = AsyncMock()
    client.get_collection = AsyncMock()
    client.close = AsyncMock()
    return client


@pytest.fixture
def store(mock_settings, qdrant_client) -> VectorStore:
    return VectorStore(mock_settings, client=qdrant_client)


class TestVectorStoreSearch:
    """Tests for nearest-neighbour search."""

    @pytest.mark.asyncio
    async def test_search_maps_payloads_best_first(self, store, qdrant_client):
        qdrant_client.query_points.return_value = models.QueryResponse(
            points=[
                models.ScoredPoint(
                    id=1,
                    version=0,
                    score=0.92,
                    payload={"text": "First", "source_url": "https://a.example"},
                ),
                models.ScoredPoint(
                    id=2,
                    version=0,
                    score=0.81,
                    payload={"text": "Second", "source_url": "https://b.example"},
                ),
            ]
        )

        results = await store.search([0.1, 0.2, 0.3], top_k=3)

        assert results == [
            ContextChunk(text="First", source_url="https://a.example", score=0.92),
            ContextChunk(text="Second", source_url="https://b.example", score=0.81),
        ]
        kwargs = qdrant_client.query_points.call_args.kwargs
        assert kwargs["collection_name"] == "test_news"
        assert kwargs["limit"] == 3
        assert kwargs["with_payload"] is True

    @pytest.mark.asyncio
    async def test_search_defaults_to_configured_top_k(self, store, qdrant_client):
        await store.search([0.1])

        assert qdrant_client.query_points.call_args.kwargs["limit"] == 3

    @pytest.mark.asyncio
    async def test_no_matches_is_empty_list(self, store):
        assert await store.search([0.1, 0.2]) == []

    @pytest.mark.asyncio
    async def test_empty_vector_skips_search(self, store, qdrant_client):
        assert await store.search([]) == []
        qdrant_client.query_points.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_payload_fields_become_empty(self, store, qdrant_client):
        qdrant_client.query_points.return_value = models.QueryResponse(
            points=[models.ScoredPoint(id=1, version=0, score=0.5, payload=None)]
        )

        results = await store.search([0.1])

        assert results == [ContextChunk(text="", source_url="", score=0.5)]

    @pytest.mark.asyncio
    async def test_search_failure_raises_vector_store_error(self, store, qdrant_client):
        qdrant_client.query_points.side_effect = ConnectionError("refused")

        with pytest.raises(VectorStoreError):
            await store.search([0.1])


class TestVectorStoreUpsert:
    """Tests for writing points."""

    @pytest.mark.asyncio
    async def test_upsert_builds_points_with_payload(self, store, qdrant_client):
        record = IndexRecord(
            id=IndexRecord.make_id("https://a.example", 0),
            vector=[0.1, 0.2],
            text="Chunk text",
            source_url="https://a.example",
            metadata={"category": "science"},
        )

        count = await store.upsert([record])

        assert count == 1
        kwargs = qdrant_client.upsert.call_args.kwargs
        assert kwargs["collection_name"] == "test_news"
        assert kwargs["wait"] is True
        point = kwargs["points"][0]
        assert point.id == record.id
        assert point.payload == {
            "text": "Chunk text",
            "source_url": "https://a.example",
            "category": "science",
        }

    @pytest.mark.asyncio
    async def test_records_without_vectors_are_skipped(self, store, qdrant_client):
        records = [
            IndexRecord(id=IndexRecord.make_id("u", 0), vector=[], text="a", source_url="u"),
        ]

        assert await store.upsert(records) == 0
        qdrant_client.upsert.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_upsert_failure_raises_vector_store_error(self, store, qdrant_client):
        qdrant_client.upsert.side_effect = RuntimeError("boom")
        record = IndexRecord(id=IndexRecord.make_id("u", 0), vector=[0.1], text="a", source_url="u")

        with pytest.raises(VectorStoreError):
            await store.upsert([record])

    def test_record_ids_are_deterministic(self):
        """Re-ingesting the same chunk must replace, not duplicate, its point."""
        assert IndexRecord.make_id("https://a.example", 0) == IndexRecord.make_id(
            "https://a.example", 0
        )
        assert IndexRecord.make_id("https://a.example", 0) != IndexRecord.make_id(
            "https://a.example", 1
        )


class TestVectorStoreCollection:
    """Tests for collection management."""

    @pytest.mark.asyncio
    async def test_reset_recreates_with_cosine_distance(self, store, qdrant_client):
        await store.reset_collection()

        qdrant_client.delete_collection.assert_awaited_once_with("test_news")
        kwargs = qdrant_client.create_collection.call_args.kwargs
        assert kwargs["collection_name"] == "test_news"
        assert kwargs["vectors_config"].size == 16
        assert kwargs["vectors_config"].distance == models.Distance.COSINE

    @pytest.mark.asyncio
    async def test_reset_creates_missing_collection(self, store, qdrant_client):
        qdrant_client.collection_exists.return_value = False

        await store.reset_collection()

        qdrant_client.delete_collection.assert_not_awaited()
        qdrant_client.create_collection.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_get_stats(self, store, qdrant_client):
        info = MagicMock()
        info.points_count = 42
        info.status = models.CollectionStatus.GREEN
        qdrant_client.get_collection.return_value = info

        stats = await store.get_stats()

        assert stats == {"collection": "test_news", "points_count": 42, "status": "green"}
