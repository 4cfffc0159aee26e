"""Qdrant vector index for news passages.

Records are (vector, text, source_url) points in a named collection using
cosine distance. Search returns payloads best first.
"""

from typing import Any

from qdrant_client import AsyncQdrantClient, models

from ..config import Settings, get_settings
from ..core import VectorStoreError, get_logger
from ..models import ContextChunk, IndexRecord

logger = get_logger(__name__)


class VectorStore:
    """Qdrant-based vector store with payload support."""

    def __init__(
        self,
        settings: Settings | None = None,
        client: AsyncQdrantClient | None = None,
    ):
        """Initialize vector store.

        Args:
            settings: Application settings. Defaults to the cached settings.
            client: Qdrant client. Created from settings if omitted.
        """
        self.settings = settings or get_settings()
        self.collection_name = self.settings.collection_name
        self.client = client or AsyncQdrantClient(
            url=self.settings.qdrant_url,
            api_key=self.settings.qdrant_api_key,
        )

    async def search(self, vector: list[float], top_k: int | None = None) -> list[ContextChunk]:
        """Find the stored passages nearest to a vector.

        Tie order is whatever Qdrant returns and may differ between calls.

        Args:
            vector: Query embedding
            top_k: Number of results to return. Defaults to settings value.

        Returns:
            Up to top_k chunks sorted by descending cosine similarity

        Raises:
            VectorStoreError: If search fails
        """
        top_k = top_k or self.settings.top_k_retrieval

        if not vector:
            logger.warning("Search attempted with an empty vector")
            return []

        try:
            response = await self.client.query_points(
                collection_name=self.collection_name,
                query=vector,
                limit=top_k,
                with_payload=True,
            )
        except Exception as e:
            logger.error(
                "Vector search failed",
                error=str(e),
                collection=self.collection_name,
            )
            raise VectorStoreError(f"Search failed: {e}", {"collection": self.collection_name})

        results = [
            ContextChunk.from_payload(point.payload, score=point.score)
            for point in response.points
        ]

        logger.info(
            "Vector search completed",
            results_found=len(results),
            top_k=top_k,
        )

        return results

    async def upsert(self, records: list[IndexRecord]) -> int:
        """Insert or replace records by id.

        Records with empty vectors are skipped.

        Args:
            records: Records to store

        Returns:
            Number of points written

        Raises:
            VectorStoreError: If the upsert fails
        """
        points = [
            models.PointStruct(id=record.id, vector=record.vector, payload=record.payload())
            for record in records
            if record.vector
        ]

        if not points:
            return 0

        try:
            await self.client.upsert(
                collection_name=self.collection_name,
                points=points,
                wait=True,
            )
        except Exception as e:
            logger.error(
                "Failed to upsert points",
                error=str(e),
                point_count=len(points),
            )
            raise VectorStoreError(f"Failed to upsert points: {e}")

        logger.info(
            "Upserted points",
            point_count=len(points),
            collection=self.collection_name,
        )
        return len(points)

    async def reset_collection(self) -> None:
        """Drop and recreate the collection. Destroys all stored points.

        Raises:
            VectorStoreError: If the collection cannot be recreated
        """
        try:
            if await self.client.collection_exists(self.collection_name):
                await self.client.delete_collection(self.collection_name)

            await self.client.create_collection(
                collection_name=self.collection_name,
                vectors_config=models.VectorParams(
                    size=self.settings.vector_size,
                    distance=models.Distance.COSINE,
                ),
            )
        except Exception as e:
            logger.error("Failed to reset collection", error=str(e))
            raise VectorStoreError(f"Failed to reset collection: {e}")

        logger.audit(
            action="collection_reset",
            resource_type="collection",
            resource_id=self.collection_name,
            vector_size=self.settings.vector_size,
        )

    async def get_stats(self) -> dict[str, Any]:
        """Get vector store statistics.

        Raises:
            VectorStoreError: If the collection cannot be inspected
        """
        try:
            info = await self.client.get_collection(self.collection_name)
        except Exception as e:
            raise VectorStoreError(f"Failed to read collection: {e}")

        return {
            "collection": self.collection_name,
            "points_count": info.points_count or 0,
            "status": str(info.status.value if hasattr(info.status, "value") else info.status),
        }

    async def close(self) -> None:
        await self.client.close()


# Singleton instance
_vector_store: VectorStore | None = None


def get_vector_store() -> VectorStore:
    """Get the singleton vector store instance."""
    global _vector_store
    if _vector_store is None:
        _vector_store = VectorStore()
    return _vector_store
