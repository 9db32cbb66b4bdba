"""Human review of AI state proposals.

For every (article, state) pair the proposal table and the confirmation table
must agree: a confirmation row exists exactly when the proposal is marked
``is_human_approved=True``. ``approve_state`` and ``reject_state`` are the only
writers of confirmations and change both tables in one transaction.
"""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsnexus.core.exceptions import (
    AmbiguousDataError,
    AppError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from newsnexus.database.models import AiStateProposal
from newsnexus.repositories.article_repository import ArticleRepository
from newsnexus.repositories.state_assignment_repository import StateAssignmentRepository
from newsnexus.services.base_service import BaseService

APPROVE = "approve"
REJECT = "reject"


def format_article_detail(rows: List[Dict[str, Any]]) -> Optional[Dict[str, Any]]:
    """Fold joined detail rows into the article detail view.

    Args:
        rows: Output of ``ArticleRepository.get_detail_rows``

    Returns:
        Detail view, or None when there are no rows (article missing)
    """
    if not rows:
        return None

    first = rows[0]
    detail: Dict[str, Any] = {
        "articleId": first["article_id"],
        "title": first["title"],
        "description": first["description"],
        "url": first["url"],
    }
    if first.get("article_content"):
        detail["content"] = first["article_content"]

    human_states: Dict[int, Dict[str, Any]] = {}
    for row in rows:
        state_id = row.get("human_state_id")
        if state_id is not None and state_id not in human_states:
            human_states[state_id] = {"id": state_id, "name": row.get("human_state_name")}
    detail["stateHumanApprovedArray"] = list(human_states.values())

    ai_row = next((row for row in rows if row.get("ai_state_id") is not None), None)
    detail["stateAiApproved"] = (
        {
            "promptId": ai_row.get("ai_prompt_id"),
            "isHumanApproved": ai_row.get("ai_is_human_approved"),
            "reasoning": ai_row.get("ai_reasoning"),
            "state": {"id": ai_row["ai_state_id"], "name": ai_row.get("ai_state_name")},
        }
        if ai_row is not None
        else None
    )
    return detail


class StateAssignmentService(BaseService):
    """Approve or reject AI-proposed states for articles."""

    def __init__(self, session: AsyncSession, logger: Optional[logging.Logger] = None, **kwargs):
        super().__init__(session, logger=logger, **kwargs)
        self.assignments = StateAssignmentRepository(session)
        self.articles = ArticleRepository(session)

    async def approve_state(self, article_id: int, state_id: int) -> Dict[str, Any]:
        """Confirm the AI proposal for (article, state).

        Returns:
            The article detail view after the change

        Raises:
            NotFoundError: No proposal exists for the pair
            AmbiguousDataError: Several proposals exist for the pair
            ConflictError: The pair is already confirmed
        """
        await self.execute(article_id, state_id, APPROVE)
        return await self.get_article_detail(article_id)

    async def reject_state(self, article_id: int, state_id: int) -> Dict[str, Any]:
        """Reject the AI proposal for (article, state).

        Rejecting an unconfirmed pair is not an error.

        Raises:
            NotFoundError: No proposal exists for the pair
            AmbiguousDataError: Several proposals exist for the pair
        """
        await self.execute(article_id, state_id, REJECT)
        return await self.get_article_detail(article_id)

    async def get_article_detail(self, article_id: int) -> Dict[str, Any]:
        """Get the article detail view.

        Raises:
            NotFoundError: If the article does not exist
        """
        return await self._call(self._read_detail, article_id)

    def validate(self, article_id, state_id, action):
        if action not in (APPROVE, REJECT):
            raise ValidationError('action must be either "approve" or "reject"')
        for name, value in (("articleId", article_id), ("stateId", state_id)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise ValidationError(f"{name} must be a valid number")

    async def run(self, article_id: int, state_id: int, action: str) -> None:
        try:
            await self._lookup_single_proposal(article_id, state_id)

            if action == APPROVE:
                await self._apply_approve(article_id, state_id)
            else:
                await self._apply_reject(article_id, state_id)

            await self.session.commit()

        except AppError:
            await self._rollback()
            raise
        except IntegrityError as e:
            await self._rollback()
            self.logger.info(
                "Concurrent approval lost the race on the confirmation constraint",
                extra={"article_id": article_id, "state_id": state_id},
            )
            raise ConflictError(
                "State already approved",
                original_error=e,
                details=f"Article {article_id} already has human-approved state {state_id}",
            ) from e
        except SQLAlchemyError as e:
            await self._rollback()
            raise self._persistence_error("Failed to record human verification", e) from e

        self.logger.info(
            f"Article {article_id} state {state_id} "
            f"{'approved' if action == APPROVE else 'rejected'} by human",
            extra={"article_id": article_id, "state_id": state_id, "action": action},
        )

    async def _lookup_single_proposal(self, article_id: int, state_id: int) -> AiStateProposal:
        proposals = await self.assignments.get_proposals(article_id, state_id)

        if not proposals:
            raise NotFoundError(
                "AI state assignment not found",
                details=(
                    f"No AI state assignment exists for article {article_id} "
                    f"with state {state_id}"
                ),
            )

        if len(proposals) > 1:
            self.logger.error(
                "Multiple AI state proposals for one article/state pair",
                extra={
                    "article_id": article_id,
                    "state_id": state_id,
                    "proposal_ids": [p.id for p in proposals],
                },
            )
            raise AmbiguousDataError(
                "Multiple AI state assignments found",
                details=(
                    f"{len(proposals)} AI state assignments exist for article "
                    f"{article_id} with state {state_id}"
                ),
            )

        return proposals[0]

    async def _apply_approve(self, article_id: int, state_id: int) -> None:
        if await self.assignments.get_confirmation(article_id, state_id) is not None:
            raise ConflictError(
                "State already approved",
                details=f"Article {article_id} already has human-approved state {state_id}",
            )
        await self.assignments.set_human_approved(article_id, state_id, True)
        await self.assignments.add_confirmation(article_id, state_id)

    async def _apply_reject(self, article_id: int, state_id: int) -> None:
        await self.assignments.set_human_approved(article_id, state_id, False)
        await self.assignments.delete_confirmation(article_id, state_id)

    async def _read_detail(self, article_id: int) -> Dict[str, Any]:
        try:
            rows = await self.articles.get_detail_rows(article_id)
        except SQLAlchemyError as e:
            raise self._persistence_error("Failed to load article details", e) from e

        detail = format_article_detail(rows)
        if detail is None:
            raise NotFoundError(
                "Article not found", details=f"No article exists with ID {article_id}"
            )
        return detail
