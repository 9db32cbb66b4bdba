"""Repositories for ingestion provenance: requests, sources and entities."""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsnexus.database.models import (
    EntityWhoFoundArticle,
    IngestionRequest,
    NewsArticleAggregatorSource,
)
from newsnexus.repositories.base_repository import BaseRepository
from newsnexus.utils.logging import get_logger

LOGGER = get_logger(__name__)


class IngestionRequestRepository(BaseRepository[IngestionRequest]):
    """Repository for IngestionRequest model."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, IngestionRequest)

    async def finalize_saved_count(self, request: IngestionRequest, saved_count: int) -> None:
        """Record the number of newly saved articles on a request.

        Called once per batch, after every item has been processed.
        """
        request.count_of_articles_saved_to_db_from_request = saved_count
        await self.session.flush()

    async def list_with_source(self) -> List[Dict[str, Any]]:
        """List requests joined with their aggregator name, newest first."""
        query = (
            select(
                IngestionRequest.id,
                IngestionRequest.and_string,
                IngestionRequest.or_string,
                IngestionRequest.not_string,
                IngestionRequest.url,
                IngestionRequest.status,
                IngestionRequest.count_of_articles_received_from_request,
                IngestionRequest.count_of_articles_saved_to_db_from_request,
                IngestionRequest.created_at,
                NewsArticleAggregatorSource.name_of_org,
            )
            .select_from(IngestionRequest)
            .outerjoin(
                NewsArticleAggregatorSource,
                NewsArticleAggregatorSource.id
                == IngestionRequest.news_article_aggregator_source_id,
            )
            .order_by(IngestionRequest.id.desc())
        )
        try:
            result = await self.session.execute(query)
            return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            LOGGER.error(f"Error listing ingestion requests: {e}", exc_info=True)
            raise


class AggregatorSourceRepository(BaseRepository[NewsArticleAggregatorSource]):
    """Repository for aggregator sources and their discovering entities."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, NewsArticleAggregatorSource)

    async def get_by_name(self, name_of_org: str) -> Optional[NewsArticleAggregatorSource]:
        query = select(NewsArticleAggregatorSource).where(
            NewsArticleAggregatorSource.name_of_org == name_of_org
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def get_entity_for_source(self, source_id: int) -> Optional[EntityWhoFoundArticle]:
        query = select(EntityWhoFoundArticle).where(
            EntityWhoFoundArticle.news_article_aggregator_source_id == source_id
        )
        result = await self.session.execute(query)
        return result.scalars().first()

    async def create_entity_for_source(self, source_id: int) -> EntityWhoFoundArticle:
        entity = EntityWhoFoundArticle(news_article_aggregator_source_id=source_id)
        self.session.add(entity)
        await self.session.flush()
        return entity
