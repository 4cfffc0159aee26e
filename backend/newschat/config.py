"""Application configuration using pydantic-settings.

All configuration values are loaded from environment variables with sensible defaults.
"""

from functools import lru_cache
from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Embedding provider
    embedding_provider: Literal["jina", "ollama"] = "jina"
    embedding_timeout_seconds: float = 30.0

    # Jina AI embeddings
    jina_api_key: str | None = None
    jina_api_url: str = "https://api.jina.ai/v1/embeddings"
    jina_embedding_model: str = "jina-embeddings-v2-base-en"

    # Ollama (embeddings fallback + generation)
    ollama_base_url: str = "http://localhost:11434"
    ollama_embedding_model: str = "nomic-embed-text"
    ollama_query_prefix: str = "search_query: "
    ollama_passage_prefix: str = "search_document: "
    generation_model: str = "llama3.1:8b"
    generation_temperature: float = 0.3
    ollama_num_ctx: int = 8192

    # Qdrant vector index
    qdrant_url: str = "http://localhost:6333"
    qdrant_api_key: str | None = None
    collection_name: str = "news_articles"
    vector_size: int = 768  # jina-embeddings-v2-base-en
    top_k_retrieval: int = 3

    # Redis session store
    redis_url: str = "redis://localhost:6379"
    session_ttl_seconds: int = 3600
    session_key_prefix: str = ""

    # News ingestion
    news_api_key: str | None = None
    news_api_url: str = "https://newsapi.org/v2/everything"
    news_categories: list[str] = [
        "general",
        "technology",
        "business",
        "sports",
        "science",
        "health",
        "entertainment",
    ]
    news_language: str = "en"
    chunk_size: int = 1000
    chunk_overlap: int = 100

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 3001
    debug: bool = False
    cors_origins: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"  # "json" or "text"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
