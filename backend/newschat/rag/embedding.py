"""Embedding generation for queries and news passages.

Two providers are supported: the Jina AI embeddings API (default) and a
local Ollama model. Both are tagged with an intent so that providers with
distinct query/passage modes can use them.
"""

from enum import Enum

import httpx
from langchain_ollama import OllamaEmbeddings

from ..config import Settings, get_settings
from ..core import ConfigurationError, EmbeddingError, get_logger

logger = get_logger(__name__)

# Jina models that accept a retrieval ``task`` parameter
_TASK_AWARE_JINA_MODELS = ("jina-embeddings-v3",)


class EmbeddingIntent(str, Enum):
    """What the embedded text will be used for."""

    QUERY = "retrieval.query"
    PASSAGE = "retrieval.passage"


class EmbeddingService:
    """Service for generating embeddings."""

    def __init__(
        self,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
        embeddings: OllamaEmbeddings | None = None,
    ):
        """Initialize embedding service.

        Args:
            settings: Application settings. Defaults to the cached settings.
            http_client: HTTP client for the Jina API. Created on first use if omitted.
            embeddings: Ollama embeddings client. Created on first use if omitted.

        Raises:
            ConfigurationError: If the Jina provider is selected without an API key
        """
        self.settings = settings or get_settings()
        self.provider = self.settings.embedding_provider

        if self.provider == "jina" and not self.settings.jina_api_key:
            raise ConfigurationError("JINA_API_KEY is not set")

        self.model = (
            self.settings.jina_embedding_model
            if self.provider == "jina"
            else self.settings.ollama_embedding_model
        )
        self._http_client = http_client
        self._embeddings = embeddings

    @property
    def http_client(self) -> httpx.AsyncClient:
        """Lazy-load the Jina HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                timeout=self.settings.embedding_timeout_seconds,
            )
        return self._http_client

    @property
    def embeddings(self) -> OllamaEmbeddings:
        """Lazy-load the Ollama embeddings client."""
        if self._embeddings is None:
            self._embeddings = OllamaEmbeddings(
                model=self.settings.ollama_embedding_model,
                base_url=self.settings.ollama_base_url,
            )
        return self._embeddings

    async def embed(
        self,
        text: str,
        intent: EmbeddingIntent = EmbeddingIntent.PASSAGE,
    ) -> list[float]:
        """Generate an embedding for a single text.

        Empty input returns an empty vector without calling the provider;
        callers must treat it as "skip this item".

        Args:
            text: Text to embed
            intent: Whether the text is a live query or a stored passage

        Returns:
            Embedding vector as list of floats, or [] for empty input

        Raises:
            EmbeddingError: If embedding generation fails
        """
        if not text or not text.strip():
            logger.warning("Skipping empty text for embedding", intent=intent.value)
            return []

        try:
            if self.provider == "jina":
                embedding = await self._embed_with_jina(text, intent)
            else:
                embedding = await self._embed_with_ollama(text, intent)
        except EmbeddingError:
            raise
        except Exception as e:
            logger.error(
                "Embedding generation failed",
                error=str(e),
                provider=self.provider,
                model=self.model,
            )
            raise EmbeddingError("Failed to generate embedding.", {"provider": self.provider})

        logger.debug(
            "Generated embedding",
            text_length=len(text),
            embedding_dim=len(embedding),
            intent=intent.value,
        )
        return embedding

    async def _embed_with_jina(self, text: str, intent: EmbeddingIntent) -> list[float]:
        # API expects a batch even for a single input
        body: dict = {"input": [text], "model": self.model}
        if self.model.startswith(_TASK_AWARE_JINA_MODELS):
            body["task"] = intent.value

        response = await self.http_client.post(
            self.settings.jina_api_url,
            json=body,
            headers={
                "Content-Type": "application/json",
                "Authorization": f"Bearer {self.settings.jina_api_key}",
            },
        )

        if response.is_error:
            logger.error(
                "Jina API error",
                status_code=response.status_code,
                body=response.text[:500],
            )
            raise EmbeddingError("Failed to generate embedding.", {"provider": "jina"})

        data = response.json().get("data") or []
        if not data or not data[0] or not data[0].get("embedding"):
            logger.error("No embeddings returned from Jina API", model=self.model)
            raise EmbeddingError("Failed to generate embedding.", {"provider": "jina"})

        return data[0]["embedding"]

    async def _embed_with_ollama(self, text: str, intent: EmbeddingIntent) -> list[float]:
        prefix = (
            self.settings.ollama_query_prefix
            if intent == EmbeddingIntent.QUERY
            else self.settings.ollama_passage_prefix
        )
        return await self.embeddings.aembed_query(f"{prefix}{text}")

    async def close(self) -> None:
        """Close the HTTP client if one was opened."""
        if self._http_client is not None:
            await self._http_client.aclose()


# Singleton instance
_embedding_service: EmbeddingService | None = None


def get_embedding_service() -> EmbeddingService:
    """Get the singleton embedding service instance."""
    global _embedding_service
    if _embedding_service is None:
        _embedding_service = EmbeddingService()
    return _embedding_service
