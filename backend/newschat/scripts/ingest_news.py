"""Load news articles into the vector index.

Usage:
    python -m newschat.scripts.ingest_news [--categories tech sports] [--keep-collection]

Process:
1. Reset the collection (unless --keep-collection)
2. Fetch articles for each category from NewsAPI
3. Chunk "title. description" text
4. Embed each chunk as a passage
5. Upsert the chunks with their source URL
"""

import argparse
import asyncio
import sys

from ..config import get_settings
from ..core import ConfigurationError, NewsChatError, get_logger
from ..rag import EmbeddingService, VectorStore
from ..services import IngestionReport, IngestionService

logger = get_logger(__name__)


async def run_ingestion(categories: list[str] | None, reset: bool) -> IngestionReport:
    """Build the services, run one ingestion pass and release clients."""
    settings = get_settings()
    embedding_service = EmbeddingService(settings)
    vector_store = VectorStore(settings)
    service = IngestionService(embedding_service, vector_store, settings)

    try:
        return await service.run(categories=categories, reset=reset)
    finally:
        await service.close()
        await vector_store.close()
        await embedding_service.close()


def print_report(report: IngestionReport) -> None:
    print(f"\n{'='*60}")
    print(f"Articles fetched:  {report.articles_fetched}")
    print(f"Articles skipped:  {report.articles_skipped}")
    print(f"Articles failed:   {report.articles_failed}")
    print(f"Chunks stored:     {report.chunks_stored}")
    if report.failed_categories:
        print(f"Failed categories: {', '.join(report.failed_categories)}")
    print(f"{'='*60}\n")


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(description="Ingest news articles into the vector index")
    parser.add_argument(
        "--categories",
        nargs="+",
        default=None,
        help="Category keywords to fetch (defaults to NEWS_CATEGORIES)",
    )
    parser.add_argument(
        "--keep-collection",
        action="store_true",
        help="Do not drop and recreate the collection first",
    )

    args = parser.parse_args()

    try:
        report = asyncio.run(run_ingestion(args.categories, reset=not args.keep_collection))
    except ConfigurationError as e:
        print(f"Configuration error: {e.message}")
        sys.exit(1)
    except NewsChatError as e:
        logger.error("Ingestion failed", error=e.message)
        print(f"Ingestion failed: {e.message}")
        sys.exit(1)

    print_report(report)
    sys.exit(0 if report.succeeded else 1)


if __name__ == "__main__":
    main()
