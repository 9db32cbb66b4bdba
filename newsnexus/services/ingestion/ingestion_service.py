"""Deduplicating ingestion of aggregator batches."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsnexus.core.exceptions import (
    APIClientError,
    AppError,
    NotFoundError,
    ValidationError,
)
from newsnexus.database.models import IngestionRequest
from newsnexus.repositories.article_repository import ArticleRepository
from newsnexus.repositories.ingestion_repository import (
    AggregatorSourceRepository,
    IngestionRequestRepository,
)
from newsnexus.services.base_service import BaseService
from newsnexus.services.ingestion.contracts import (
    ArticleItem,
    IngestResult,
    ItemFailure,
    Provenance,
)
from newsnexus.services.ingestion.normalizers import parse_pub_date

GOOGLE_NEWS_RSS_ORG_NAME = "Google News RSS"
NEWS_API_ORG_NAME = "NewsAPI"
GNEWS_ORG_NAME = "GNews"


class IngestionService(BaseService):
    """Stores aggregator batches as articles, skipping known urls.

    Items are processed in order. Each insert runs in its own savepoint, so a
    failing item is rolled back and reported without losing the rest of the
    batch. The request row is created (or looked up) first and its saved
    count is written once, after the last item.
    """

    def __init__(self, session: AsyncSession, logger: Optional[logging.Logger] = None, **kwargs):
        super().__init__(session, logger=logger, **kwargs)
        self.articles = ArticleRepository(session)
        self.requests = IngestionRequestRepository(session)
        self.sources = AggregatorSourceRepository(session)

    async def ingest_batch(self, items: List[ArticleItem], provenance: Provenance) -> IngestResult:
        """Ingest one batch.

        Args:
            items: Canonical items in aggregator order
            provenance: Source, discovering entity and request metadata

        Returns:
            IngestResult with the request id, counts, new article ids and
            per-item failures

        Raises:
            NotFoundError: If ``provenance.request_id`` does not exist
            PersistenceError: If the request row or the commit fails
        """
        return await self.execute(items, provenance)

    def validate(self, items, provenance):
        if items is None or not isinstance(items, list):
            raise ValidationError("items must be a list")
        if provenance is None:
            raise ValidationError("provenance is required")

    async def run(self, items: List[ArticleItem], provenance: Provenance) -> IngestResult:
        try:
            request = await self._resolve_request(items, provenance)

            saved_ids: List[int] = []
            failures: List[ItemFailure] = []
            duplicates = 0
            without_link = 0
            seen_urls = set()

            for item in items:
                link = item.link
                if not link:
                    self.logger.warning(
                        "Skipping article without link",
                        extra={"request_id": request.id, "title": item.title},
                    )
                    without_link += 1
                    continue

                if link in seen_urls or await self.articles.get_by_url(link) is not None:
                    self.logger.info(f"Skipping duplicate article: {link}")
                    duplicates += 1
                    continue

                article_id, failure = await self._store_item(item, request.id, provenance)
                if failure is not None:
                    failures.append(failure)
                    continue

                seen_urls.add(link)
                if article_id is None:
                    duplicates += 1
                else:
                    saved_ids.append(article_id)

            await self.requests.finalize_saved_count(request, len(saved_ids))
            await self.session.commit()

        except AppError:
            await self._rollback()
            raise
        except SQLAlchemyError as e:
            await self._rollback()
            raise self._persistence_error("Failed to store ingestion batch", e) from e

        self.logger.info(
            f"Stored {len(saved_ids)} new articles for request {request.id} "
            f"({len(items)} received).",
            extra={
                "request_id": request.id,
                "duplicates": duplicates,
                "without_link": without_link,
                "failures": len(failures),
            },
        )

        return IngestResult(
            request_id=request.id,
            articles_received=len(items),
            articles_saved=len(saved_ids),
            article_ids=saved_ids,
            failures=failures,
            duplicates_skipped=duplicates,
            skipped_without_link=without_link,
        )

    async def _resolve_request(
        self, items: List[ArticleItem], provenance: Provenance
    ) -> IngestionRequest:
        if provenance.request_id is not None:
            request = await self.requests.get_by_id(provenance.request_id)
            if request is None:
                raise NotFoundError(f"Ingestion request {provenance.request_id} not found")
            return request

        end_date = provenance.date_end_of_request or datetime.now(
            timezone.utc
        ).date()

        return await self.requests.create(
            news_article_aggregator_source_id=provenance.aggregator_source_id,
            url=provenance.request_url,
            and_string=provenance.and_string,
            or_string=provenance.or_string,
            not_string=provenance.not_string,
            date_start_of_request=provenance.date_start_of_request,
            date_end_of_request=end_date,
            count_of_articles_received_from_request=len(items),
            status="success",
            is_from_automation=provenance.is_from_automation,
        )

    async def _store_item(
        self, item: ArticleItem, request_id: int, provenance: Provenance
    ) -> Tuple[Optional[int], Optional[ItemFailure]]:
        """Insert one article (and its content) inside a savepoint.

        Returns:
            (article_id, None) on success, (None, None) when a concurrent
            writer stored the same url first, (None, failure) otherwise
        """
        published_date = None
        try:
            published_date = parse_pub_date(item.pub_date)
        except ValueError:
            self.logger.warning(f"Failed to parse pubDate: {item.pub_date}")

        try:
            async with self.session.begin_nested():
                article = await self.articles.create_article(
                    url=item.link,
                    title=item.title or "",
                    description=item.description or "",
                    publication_name=item.source or "Unknown",
                    published_date=published_date,
                    entity_who_found_article_id=provenance.entity_who_found_article_id,
                    news_api_request_id=request_id,
                    author=item.author,
                    url_to_image=item.url_to_image,
                )
                body = item.content or item.description
                if body:
                    await self.articles.add_content(article.id, body)
            return article.id, None

        except IntegrityError as e:
            # A url stored by another writer is a duplicate, any other violation a failure
            if await self.articles.get_by_url(item.link) is not None:
                self.logger.info(f"Skipping duplicate article stored concurrently: {item.link}")
                return None, None
            return None, self._item_failure(item, request_id, e)

        except SQLAlchemyError as e:
            return None, self._item_failure(item, request_id, e)

    def _item_failure(
        self, item: ArticleItem, request_id: int, error: SQLAlchemyError
    ) -> ItemFailure:
        self.logger.warning(
            f"Failed to store article: {item.link}",
            extra={"request_id": request_id, "error": str(error)},
        )
        return ItemFailure(link=item.link, error=str(getattr(error, "orig", None) or error))

    async def ensure_aggregator_source_and_entity(
        self,
        name_of_org: str,
        is_rss: bool = False,
        is_api: bool = False,
        url: Optional[str] = None,
    ) -> Tuple[int, int]:
        """Get or create an aggregator source and its discovering entity.

        Returns:
            (news_article_aggregator_source_id, entity_who_found_article_id)
        """
        return await self._call(self._ensure_source, name_of_org, is_rss, is_api, url)

    async def _ensure_source(
        self, name_of_org: str, is_rss: bool, is_api: bool, url: Optional[str]
    ) -> Tuple[int, int]:
        try:
            source = await self.sources.get_by_name(name_of_org)
            if source is None:
                try:
                    async with self.session.begin_nested():
                        source = await self.sources.create(
                            name_of_org=name_of_org, is_rss=is_rss, is_api=is_api, url=url
                        )
                    self.logger.info(f"Created NewsArticleAggregatorSource: {name_of_org}")
                except IntegrityError:
                    source = await self.sources.get_by_name(name_of_org)

            entity = await self.sources.get_entity_for_source(source.id)
            if entity is None:
                entity = await self.sources.create_entity_for_source(source.id)
                self.logger.info(f"Created EntityWhoFoundArticle for: {name_of_org}")

            source_id, entity_id = source.id, entity.id
            await self.session.commit()
            return source_id, entity_id

        except SQLAlchemyError as e:
            await self._rollback()
            raise self._persistence_error("Failed to ensure aggregator source", e) from e

    async def record_failed_request(
        self, provenance: Provenance, message: str
    ) -> int:
        """Store an IngestionRequest with ``status="error"`` and no articles."""
        return await self._call(self._record_failed_request, provenance, message)

    async def _record_failed_request(self, provenance: Provenance, message: str) -> int:
        try:
            request = await self.requests.create(
                news_article_aggregator_source_id=provenance.aggregator_source_id,
                url=provenance.request_url,
                and_string=provenance.and_string,
                or_string=provenance.or_string,
                not_string=provenance.not_string,
                date_start_of_request=provenance.date_start_of_request,
                date_end_of_request=provenance.date_end_of_request,
                count_of_articles_received_from_request=0,
                count_of_articles_saved_to_db_from_request=0,
                status="error",
                is_from_automation=provenance.is_from_automation,
            )
            request_id = request.id
            await self.session.commit()
        except SQLAlchemyError as e:
            await self._rollback()
            raise self._persistence_error("Failed to record ingestion request", e) from e

        self.logger.warning(
            "Recorded failed aggregator request",
            extra={"request_id": request_id, "error": message},
        )
        return request_id

    async def search_and_ingest(
        self, client: Any, params: Dict[str, Any], provenance: Provenance
    ) -> IngestResult:
        """Run an aggregator search and ingest what it returns.

        A failed search is still recorded as an IngestionRequest with
        ``status="error"`` before the error propagates.

        Args:
            client: ``NewsApiClient`` or ``GNewsClient``
            params: Search parameters from ``client.build_params``
            provenance: Provenance without ``request_id``

        Raises:
            APIClientError: If the aggregator call fails
        """
        try:
            items, _ = await client.search(params)
        except APIClientError as e:
            await self.record_failed_request(provenance, e.message)
            raise

        self.logger.info(
            f"{client.ORG_NAME} returned {len(items)} articles",
            extra={"url": provenance.request_url},
        )
        return await self.ingest_batch(items, provenance)

    async def list_requests(self) -> List[Dict[str, Any]]:
        """List ingestion requests with their aggregator name, newest first."""
        return await self._call(self._list_requests)

    async def _list_requests(self) -> List[Dict[str, Any]]:
        try:
            rows = await self.requests.list_with_source()
        except SQLAlchemyError as e:
            raise self._persistence_error("Failed to list ingestion requests", e) from e

        return [
            {
                "id": row["id"],
                "nameOfOrg": row["name_of_org"],
                "andString": row["and_string"],
                "orString": row["or_string"],
                "notString": row["not_string"],
                "url": row["url"],
                "status": row["status"],
                "countOfArticlesReceivedFromRequest": row[
                    "count_of_articles_received_from_request"
                ],
                "countOfArticlesSavedToDbFromRequest": row[
                    "count_of_articles_saved_to_db_from_request"
                ],
                "createdAt": row["created_at"],
            }
            for row in rows
        ]
