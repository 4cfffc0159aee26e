"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .api import chat_router, health_router
from .config import get_settings
from .core import NewsChatError, get_logger
from .services import get_chat_pipeline

logger = get_logger(__name__)

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build the chat pipeline on startup and release its clients on shutdown.

    Building eagerly means a missing credential stops the process instead
    of failing individual requests.
    """
    logger.info(
        "Starting news chat backend",
        embedding_provider=settings.embedding_provider,
        generation_model=settings.generation_model,
        collection=settings.collection_name,
        session_ttl_seconds=settings.session_ttl_seconds,
    )
    pipeline = get_chat_pipeline()
    yield
    logger.info("Shutting down news chat backend")
    for client in (pipeline.session_store, pipeline.vector_store, pipeline.embedding_service):
        await client.close()


app = FastAPI(
    title="News Chat",
    description="Retrieval-augmented chat over ingested news articles",
    version="0.1.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST"],
    allow_headers=["*"],
)


@app.exception_handler(NewsChatError)
async def news_chat_exception_handler(request: Request, exc: NewsChatError) -> JSONResponse:
    """Map errors that escape a route to their status code."""
    logger.error(
        "Request error",
        path=request.url.path,
        error_type=type(exc).__name__,
        error=exc.message,
        details=exc.details,
    )
    return JSONResponse(status_code=exc.status_code, content={"error": exc.message})


app.include_router(health_router, prefix="/api")
app.include_router(chat_router, prefix="/api")


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "newschat.main:app",
        host=settings.api_host,
        port=settings.api_port,
        reload=settings.debug,
    )
