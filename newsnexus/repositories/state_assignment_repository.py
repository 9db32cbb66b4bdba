"""Repository for AI state proposals and human state confirmations.

Both tables are touched by a single review transition, so every write here
only flushes; the reconciliation service decides when to commit.
"""

from typing import Any, Dict, List, Optional

from sqlalchemy import and_, delete, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsnexus.database.models import (
    AiStateProposal,
    Article,
    HumanStateConfirmation,
    State,
)
from newsnexus.repositories.base_repository import BaseRepository
from newsnexus.utils.logging import get_logger

LOGGER = get_logger(__name__)


class StateAssignmentRepository(BaseRepository[AiStateProposal]):
    """Repository for the AI proposal and human confirmation tables."""

    def __init__(self, session: AsyncSession):
        super().__init__(session, AiStateProposal)

    async def get_proposals(self, article_id: int, state_id: int) -> List[AiStateProposal]:
        """Get every AI proposal row for an (article, state) pair.

        More than one row is an anomaly the caller must detect, so no
        uniqueness is assumed here.
        """
        try:
            query = (
                select(AiStateProposal)
                .where(
                    and_(
                        AiStateProposal.article_id == article_id,
                        AiStateProposal.state_id == state_id,
                    )
                )
                .order_by(AiStateProposal.id)
            )
            result = await self.session.execute(query)
            return list(result.scalars().all())
        except SQLAlchemyError as e:
            LOGGER.error(
                f"Error getting AI state proposals: {e}",
                extra={"article_id": article_id, "state_id": state_id},
                exc_info=True,
            )
            raise

    async def set_human_approved(
        self, article_id: int, state_id: int, is_human_approved: Optional[bool]
    ) -> int:
        """Set the human verdict on the proposal for a pair.

        Returns:
            Number of rows updated
        """
        stmt = (
            update(AiStateProposal)
            .where(
                and_(
                    AiStateProposal.article_id == article_id,
                    AiStateProposal.state_id == state_id,
                )
            )
            .values(is_human_approved=is_human_approved)
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def get_confirmation(
        self, article_id: int, state_id: int
    ) -> Optional[HumanStateConfirmation]:
        query = select(HumanStateConfirmation).where(
            and_(
                HumanStateConfirmation.article_id == article_id,
                HumanStateConfirmation.state_id == state_id,
            )
        )
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def add_confirmation(self, article_id: int, state_id: int) -> HumanStateConfirmation:
        """Insert a human confirmation row.

        Raises:
            IntegrityError: If the pair is already confirmed
        """
        confirmation = HumanStateConfirmation(article_id=article_id, state_id=state_id)
        self.session.add(confirmation)
        await self.session.flush()
        return confirmation

    async def delete_confirmation(self, article_id: int, state_id: int) -> int:
        """Delete the confirmation for a pair, if any.

        Returns:
            Number of rows deleted (0 when nothing was confirmed)
        """
        stmt = (
            delete(HumanStateConfirmation)
            .where(
                and_(
                    HumanStateConfirmation.article_id == article_id,
                    HumanStateConfirmation.state_id == state_id,
                )
            )
            .execution_options(synchronize_session="fetch")
        )
        result = await self.session.execute(stmt)
        return result.rowcount

    async def list_confirmations(self) -> List[HumanStateConfirmation]:
        result = await self.session.execute(
            select(HumanStateConfirmation).order_by(HumanStateConfirmation.id)
        )
        return list(result.scalars().all())

    async def list_with_articles(self, include_null_state: bool) -> List[Dict[str, Any]]:
        """List articles joined with their AI state proposals.

        Args:
            include_null_state: If True return only proposals without a
                state; otherwise only proposals with one

        Returns:
            Flat row mappings ordered by article creation, newest first
        """
        state_filter = (
            AiStateProposal.state_id.is_(None)
            if include_null_state
            else AiStateProposal.state_id.is_not(None)
        )
        query = (
            select(
                Article.id.label("article_id"),
                Article.title,
                Article.description,
                Article.url,
                Article.created_at,
                AiStateProposal.prompt_id,
                AiStateProposal.is_human_approved,
                AiStateProposal.is_determined_to_be_error,
                AiStateProposal.occurred_in_the_us,
                AiStateProposal.reasoning,
                AiStateProposal.state_id,
                State.name.label("state_name"),
            )
            .select_from(Article)
            .join(AiStateProposal, AiStateProposal.article_id == Article.id)
            .outerjoin(State, State.id == AiStateProposal.state_id)
            .where(state_filter)
            .order_by(Article.created_at.desc(), Article.id.desc(), AiStateProposal.id)
        )
        try:
            result = await self.session.execute(query)
            return [dict(row) for row in result.mappings().all()]
        except SQLAlchemyError as e:
            LOGGER.error(
                f"Error listing articles with state assignments: {e}",
                extra={"include_null_state": include_null_state},
                exc_info=True,
            )
            raise
