"""Repository for AI-drafted and human-approved report content."""

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsnexus.database.models import (
    AiArticleApproval,
    Article,
    ArticleApproval,
    HumanStateConfirmation,
    State,
)
from newsnexus.repositories.base_repository import BaseRepository
from newsnexus.utils.logging import get_logger

LOGGER = get_logger(__name__)

REPORT_TEXT_FIELDS = (
    "headline_for_pdf_report",
    "publication_name_for_pdf_report",
    "publication_date_for_pdf_report",
    "text_for_pdf_report",
    "url_for_pdf_report",
)


class ApprovalRepository(BaseRepository[ArticleApproval]):
    """Repository for content approval rows."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, ArticleApproval)

    async def get_ai_proposals(self, article_id: int) -> List[AiArticleApproval]:
        query = (
            select(AiArticleApproval)
            .where(AiArticleApproval.article_id == article_id)
            .order_by(AiArticleApproval.id)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_human_approval(self, article_id: int) -> Optional[ArticleApproval]:
        query = select(ArticleApproval).where(ArticleApproval.article_id == article_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def report_rows(self) -> List[Dict[str, Any]]:
        """Flat rows for the approved-articles report.

        Article LEFT JOIN confirmed states LEFT JOIN human approvals, one row
        per (state, approval) combination, ordered by article id.
        """
        query = (
            select(
                Article.id.label("article_id"),
                Article.title,
                Article.description,
                Article.published_date,
                Article.created_at,
                Article.publication_name,
                Article.url,
                Article.author,
                Article.url_to_image,
                Article.entity_who_found_article_id,
                Article.news_api_request_id,
                State.id.label("state_id"),
                State.name.label("state_name"),
                State.abbreviation.label("state_abbreviation"),
                ArticleApproval.id.label("approved_id"),
                ArticleApproval.artificial_intelligence_id.label("approved_by_ai_id"),
                ArticleApproval.user_id.label("approved_by_user_id"),
                ArticleApproval.created_at.label("approved_at"),
                ArticleApproval.is_approved,
                ArticleApproval.headline_for_pdf_report,
                ArticleApproval.publication_name_for_pdf_report,
                ArticleApproval.publication_date_for_pdf_report,
                ArticleApproval.text_for_pdf_report,
                ArticleApproval.url_for_pdf_report,
                ArticleApproval.km_notes,
            )
            .select_from(Article)
            .outerjoin(
                HumanStateConfirmation, HumanStateConfirmation.article_id == Article.id
            )
            .outerjoin(State, State.id == HumanStateConfirmation.state_id)
            .outerjoin(ArticleApproval, ArticleApproval.article_id == Article.id)
            .order_by(Article.id, HumanStateConfirmation.id, ArticleApproval.id)
        )
        try:
            result = await self.session.execute(query)
            return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            LOGGER.error(f"Error loading approved report rows: {e}", exc_info=True)
            raise
