"""Core utilities for the news chat backend."""

from .exceptions import (
    ClientError,
    ConfigurationError,
    EmbeddingError,
    GenerationError,
    IngestionError,
    LLMError,
    NewsChatError,
    PersistenceError,
    RetrievalError,
    SessionStoreError,
    VectorStoreError,
)
from .logging import AuditLogger, configure_logging, get_logger, sanitize

__all__ = [
    # Exceptions
    "ClientError",
    "ConfigurationError",
    "EmbeddingError",
    "GenerationError",
    "IngestionError",
    "LLMError",
    "NewsChatError",
    "PersistenceError",
    "RetrievalError",
    "SessionStoreError",
    "VectorStoreError",
    # Logging
    "AuditLogger",
    "configure_logging",
    "get_logger",
    "sanitize",
]
