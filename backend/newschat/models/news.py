"""News article and vector index record models."""

from dataclasses import dataclass, field
from uuid import NAMESPACE_URL, uuid5


@dataclass(frozen=True)
class ContextChunk:
    """A passage retrieved from the vector index for one request.

    The relevance rank is the chunk's position in the search result
    (best first); ``score`` is the provider's similarity value.
    """

    text: str
    source_url: str
    score: float | None = None

    @classmethod
    def from_payload(cls, payload: dict | None, score: float | None = None) -> "ContextChunk":
        payload = payload or {}
        return cls(
            text=payload.get("text") or "",
            source_url=payload.get("source_url") or "",
            score=score,
        )


@dataclass
class NewsArticle:
    """An article returned by the news API."""

    title: str
    description: str
    url: str
    content: str | None = None
    category: str | None = None

    @classmethod
    def from_api(cls, data: dict, category: str | None = None) -> "NewsArticle":
        return cls(
            title=data.get("title") or "",
            description=data.get("description") or "",
            url=data.get("url") or "",
            content=data.get("content"),
            category=category,
        )

    @property
    def is_usable(self) -> bool:
        """Articles without a title or description carry no useful text."""
        return bool(self.title and self.description)

    @property
    def embedding_text(self) -> str:
        return f"{self.title}. {self.description}"


@dataclass
class IndexRecord:
    """A point to upsert into the vector index."""

    id: str
    vector: list[float]
    text: str
    source_url: str
    metadata: dict[str, str] = field(default_factory=dict)

    @staticmethod
    def make_id(source_url: str, chunk_index: int) -> str:
        """Deterministic point id so re-ingesting an article replaces it."""
        return str(uuid5(NAMESPACE_URL, f"{source_url}#{chunk_index}"))

    def payload(self) -> dict:
        return {"text": self.text, "source_url": self.source_url, **self.metadata}
