"""Human approval of AI-drafted report content."""

import logging
from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsnexus.core.exceptions import (
    AlreadyApprovedError,
    AmbiguousDataError,
    AppError,
    NotFoundError,
)
from newsnexus.database.models import AiArticleApproval, ArticleApproval
from newsnexus.repositories.approval_repository import REPORT_TEXT_FIELDS, ApprovalRepository
from newsnexus.services.base_service import BaseService


def _report_fields(proposal: AiArticleApproval) -> Dict[str, Any]:
    return {name: getattr(proposal, name) for name in REPORT_TEXT_FIELDS}


class ContentApprovalService(BaseService):
    """Copy an AI-drafted report text into the human approval table.

    There is at most one human row per article (UNIQUE ``article_id``). A
    previously rejected row is overwritten in place; an approved one is left
    alone.
    """

    def __init__(self, session: AsyncSession, logger: Optional[logging.Logger] = None, **kwargs):
        super().__init__(session, logger=logger, **kwargs)
        self.approvals = ApprovalRepository(session)

    async def approve_content(self, article_id: int, user_id: Optional[int]) -> Dict[str, str]:
        """Approve the AI-drafted report text of an article.

        Args:
            article_id: Article whose AI draft is approved
            user_id: Reviewer recorded on the human row

        Returns:
            ``{"message": ...}``

        Raises:
            NotFoundError: No AI draft for the article
            AmbiguousDataError: Several AI drafts for the article
            AlreadyApprovedError: A human already approved this article
        """
        return await self.execute(article_id, user_id)

    async def run(self, article_id: int, user_id: Optional[int]) -> Dict[str, str]:
        try:
            proposal = await self._single_ai_proposal(article_id)
            fields = _report_fields(proposal)

            existing = await self.approvals.get_human_approval(article_id)
            if existing is not None:
                message = self._apply_to_existing(existing, fields, user_id)
            else:
                message = await self._create_or_merge(proposal, fields, article_id, user_id)

            await self.session.flush()
            await self.session.commit()

        except AppError:
            await self._rollback()
            raise
        except SQLAlchemyError as e:
            await self._rollback()
            raise self._persistence_error("Failed to approve article content", e) from e

        self.logger.info(message, extra={"article_id": article_id, "user_id": user_id})
        return {"message": message}

    async def _single_ai_proposal(self, article_id: int) -> AiArticleApproval:
        proposals = await self.approvals.get_ai_proposals(article_id)
        if not proposals:
            raise NotFoundError(f"No AI approval found for article {article_id}")
        if len(proposals) > 1:
            self.logger.error(
                "Multiple AI approvals for one article",
                extra={"article_id": article_id, "proposal_ids": [p.id for p in proposals]},
            )
            raise AmbiguousDataError(
                f"Multiple AI approvals found for article {article_id}",
                details=f"{len(proposals)} AI approval rows exist; manual cleanup required",
            )
        return proposals[0]

    def _apply_to_existing(
        self, existing: ArticleApproval, fields: Dict[str, Any], user_id: Optional[int]
    ) -> str:
        if existing.is_approved:
            raise AlreadyApprovedError(
                f"Article {existing.article_id} is already approved",
                details={"articleApprovedId": existing.id},
            )

        for name, value in fields.items():
            setattr(existing, name, value)
        existing.is_approved = True
        existing.user_id = user_id
        return f"Article {existing.article_id} approval updated from rejected to approved"

    async def _create_or_merge(
        self,
        proposal: AiArticleApproval,
        fields: Dict[str, Any],
        article_id: int,
        user_id: Optional[int],
    ) -> str:
        """Insert the human row; if another writer got there first, apply the
        existing-row rules to the row it wrote."""
        try:
            async with self.session.begin_nested():
                await self.approvals.create(
                    article_id=article_id,
                    user_id=user_id,
                    artificial_intelligence_id=proposal.artificial_intelligence_id,
                    is_approved=proposal.is_approved,
                    km_notes=proposal.km_notes,
                    **fields,
                )
        except IntegrityError:
            existing = await self.approvals.get_human_approval(article_id)
            if existing is None:
                raise
            return self._apply_to_existing(existing, fields, user_id)

        return f"Article {article_id} approved successfully"
