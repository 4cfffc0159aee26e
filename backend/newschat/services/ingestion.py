"""News ingestion service.

Fetches articles per category from NewsAPI, chunks and embeds them as
passages, and upserts them into the vector index. Meant to be run as an
offline job (see ``newschat.scripts.ingest_news``), never by the API.
"""

from dataclasses import dataclass, field

import httpx

from ..config import Settings, get_settings
from ..core import ConfigurationError, IngestionError, NewsChatError, get_logger
from ..models import IndexRecord, NewsArticle
from ..rag import EmbeddingIntent, EmbeddingService, VectorStore, chunk_text

logger = get_logger(__name__)


@dataclass
class IngestionReport:
    """Counters for one ingestion run."""

    articles_fetched: int = 0
    articles_skipped: int = 0
    articles_failed: int = 0
    chunks_stored: int = 0
    failed_categories: list[str] = field(default_factory=list)

    @property
    def succeeded(self) -> bool:
        return not self.failed_categories and self.articles_failed == 0


class IngestionService:
    """Service for loading news articles into the vector index."""

    def __init__(
        self,
        embedding_service: EmbeddingService,
        vector_store: VectorStore,
        settings: Settings | None = None,
        http_client: httpx.AsyncClient | None = None,
    ):
        """Initialize ingestion service.

        Raises:
            ConfigurationError: If NEWS_API_KEY is not set
        """
        self.settings = settings or get_settings()
        if not self.settings.news_api_key:
            raise ConfigurationError("NEWS_API_KEY is not set")

        self.embedding_service = embedding_service
        self.vector_store = vector_store
        self.http_client = http_client or httpx.AsyncClient(timeout=30.0)

    async def fetch_articles(self, category: str) -> list[NewsArticle]:
        """Fetch articles matching a category keyword.

        Raises:
            IngestionError: If the news API request fails
        """
        try:
            response = await self.http_client.get(
                self.settings.news_api_url,
                params={
                    "q": category,
                    "language": self.settings.news_language,
                    "sortBy": "relevancy",
                    "apiKey": self.settings.news_api_key,
                },
            )
            response.raise_for_status()
            articles = response.json().get("articles") or []
        except (httpx.HTTPError, ValueError) as e:
            logger.error("News API request failed", category=category, error=str(e))
            raise IngestionError(f"Failed to fetch articles: {e}", category)

        return [NewsArticle.from_api(item, category) for item in articles]

    async def ingest_article(self, article: NewsArticle) -> int:
        """Chunk, embed and store one article.

        Returns:
            Number of chunks stored
        """
        records = []
        chunks = chunk_text(
            article.embedding_text,
            chunk_size=self.settings.chunk_size,
            overlap=self.settings.chunk_overlap,
        )
        for index, chunk in enumerate(chunks):
            vector = await self.embedding_service.embed(chunk, EmbeddingIntent.PASSAGE)
            if not vector:
                continue
            records.append(
                IndexRecord(
                    id=IndexRecord.make_id(article.url, index),
                    vector=vector,
                    text=chunk,
                    source_url=article.url,
                    metadata={"category": article.category or ""},
                )
            )

        return await self.vector_store.upsert(records)

    async def run(self, categories: list[str] | None = None, reset: bool = True) -> IngestionReport:
        """Run a full ingestion pass.

        Args:
            categories: Category keywords to fetch. Defaults to settings value.
            reset: Drop and recreate the collection first (destructive)

        Returns:
            IngestionReport with counters
        """
        categories = categories or self.settings.news_categories
        report = IngestionReport()

        if reset:
            await self.vector_store.reset_collection()

        for category in categories:
            try:
                articles = await self.fetch_articles(category)
            except IngestionError:
                report.failed_categories.append(category)
                continue

            report.articles_fetched += len(articles)
            logger.info("Fetched articles", category=category, article_count=len(articles))

            for article in articles:
                if not article.is_usable:
                    report.articles_skipped += 1
                    continue

                try:
                    report.chunks_stored += await self.ingest_article(article)
                except NewsChatError as e:
                    report.articles_failed += 1
                    logger.error(
                        "Failed to ingest article",
                        url=article.url,
                        error=e.message,
                    )

        logger.audit(
            action="ingestion_completed",
            resource_type="collection",
            resource_id=self.vector_store.collection_name,
            categories=categories,
            articles_fetched=report.articles_fetched,
            articles_skipped=report.articles_skipped,
            articles_failed=report.articles_failed,
            chunks_stored=report.chunks_stored,
            reset=reset,
        )
        return report

    async def close(self) -> None:
        await self.http_client.aclose()
