"""Health check endpoint."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...core import VectorStoreError
from ...rag import VectorStore, get_vector_store
from ...services import SessionStore, get_session_store

router = APIRouter(tags=["Health"])


class VectorStoreStats(BaseModel):
    """Vector store statistics."""
    collection: str
    points_count: int
    status: str


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    vector_store: VectorStoreStats | None
    session_store_reachable: bool


@router.get("/health", response_model=HealthResponse)
async def health_check(
    vector_store: VectorStore = Depends(get_vector_store),
    session_store: SessionStore = Depends(get_session_store),
) -> HealthResponse:
    """Check API health status."""
    try:
        stats = await vector_store.get_stats()
        vector_stats = VectorStoreStats(**stats)
    except VectorStoreError:
        vector_stats = None

    session_store_reachable = await session_store.ping()

    healthy = vector_stats is not None and session_store_reachable
    return HealthResponse(
        status="healthy" if healthy else "degraded",
        vector_store=vector_stats,
        session_store_reachable=session_store_reachable,
    )
