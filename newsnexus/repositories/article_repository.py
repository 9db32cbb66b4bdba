"""Repository for article and article content data access."""

from datetime import datetime
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from newsnexus.database.models import (
    AiStateProposal,
    Article,
    ArticleContent,
    HumanStateConfirmation,
    State,
)
from newsnexus.repositories.base_repository import BaseRepository
from newsnexus.utils.logging import get_logger

LOGGER = get_logger(__name__)


class ArticleRepository(BaseRepository[Article]):
    """Repository for Article model.

    Provides the url lookup used for deduplication and the joined
    detail query used after every state review.
    """

    def __init__(self, session: AsyncSession):
        super().__init__(session, Article)

    async def get_by_url(self, url: str) -> Optional[Article]:
        """Get article by exact url match.

        Args:
            url: Article url (dedup key)

        Returns:
            Article if found, None otherwise
        """
        try:
            query = select(Article).where(Article.url == url)
            result = await self.session.execute(query)
            return result.scalars().first()
        except SQLAlchemyError as e:
            LOGGER.error(
                f"Error getting article by url: {e}",
                extra={"url": url},
                exc_info=True,
            )
            raise

    async def create_article(
        self,
        url: str,
        title: str,
        description: str,
        publication_name: str,
        published_date: Optional[datetime],
        entity_who_found_article_id: Optional[int],
        news_api_request_id: Optional[int],
        author: Optional[str] = None,
        url_to_image: Optional[str] = None,
    ) -> Article:
        """Insert a new article row."""
        return await self.create(
            url=url,
            title=title,
            description=description,
            publication_name=publication_name,
            published_date=published_date,
            entity_who_found_article_id=entity_who_found_article_id,
            news_api_request_id=news_api_request_id,
            author=author,
            url_to_image=url_to_image,
        )

    async def add_content(self, article_id: int, content: str) -> ArticleContent:
        """Attach a content record to an article."""
        try:
            record = ArticleContent(article_id=article_id, content=content)
            self.session.add(record)
            await self.session.flush()
            return record
        except SQLAlchemyError as e:
            LOGGER.error(
                f"Error adding article content: {e}",
                extra={"article_id": article_id},
                exc_info=True,
            )
            raise

    async def get_detail_rows(self, article_id: int) -> List[Dict[str, Any]]:
        """Get flat rows describing one article with its states.

        One row per combination of human-confirmed state and AI proposal;
        callers fold them into a single detail view.

        Args:
            article_id: Article ID

        Returns:
            List of row mappings (empty if the article does not exist)
        """
        human_state = aliased(State)
        ai_state = aliased(State)

        query = (
            select(
                Article.id.label("article_id"),
                Article.title,
                Article.description,
                Article.url,
                ArticleContent.content.label("article_content"),
                HumanStateConfirmation.state_id.label("human_state_id"),
                human_state.name.label("human_state_name"),
                AiStateProposal.id.label("ai_proposal_id"),
                AiStateProposal.prompt_id.label("ai_prompt_id"),
                AiStateProposal.is_human_approved.label("ai_is_human_approved"),
                AiStateProposal.reasoning.label("ai_reasoning"),
                AiStateProposal.state_id.label("ai_state_id"),
                ai_state.name.label("ai_state_name"),
            )
            .select_from(Article)
            .outerjoin(ArticleContent, ArticleContent.article_id == Article.id)
            .outerjoin(
                HumanStateConfirmation, HumanStateConfirmation.article_id == Article.id
            )
            .outerjoin(human_state, human_state.id == HumanStateConfirmation.state_id)
            .outerjoin(AiStateProposal, AiStateProposal.article_id == Article.id)
            .outerjoin(ai_state, ai_state.id == AiStateProposal.state_id)
            .where(Article.id == article_id)
            .order_by(
                ArticleContent.id,
                HumanStateConfirmation.id,
                AiStateProposal.id,
            )
        )

        try:
            result = await self.session.execute(query)
            return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            LOGGER.error(
                f"Error getting article detail rows: {e}",
                extra={"article_id": article_id},
                exc_info=True,
            )
            raise
