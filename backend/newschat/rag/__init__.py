"""RAG components for the news chat backend."""

from .chunking import chunk_text
from .embedding import EmbeddingIntent, EmbeddingService, get_embedding_service
from .prompts import (
    REFUSAL_MESSAGE,
    SYSTEM_INSTRUCTION,
    build_chat_prompt,
    collect_citations,
    format_context,
    format_history,
)
from .vectorstore import VectorStore, get_vector_store

__all__ = [
    # Chunking
    "chunk_text",
    # Embedding
    "EmbeddingIntent",
    "EmbeddingService",
    "get_embedding_service",
    # Prompts
    "REFUSAL_MESSAGE",
    "SYSTEM_INSTRUCTION",
    "build_chat_prompt",
    "collect_citations",
    "format_context",
    "format_history",
    # Vector store
    "VectorStore",
    "get_vector_store",
]
