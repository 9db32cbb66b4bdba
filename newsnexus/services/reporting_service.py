"""Read-side aggregation for review and reporting screens."""

import logging
from typing import Any, Dict, List, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsnexus.core.exceptions import ValidationError
from newsnexus.repositories.approval_repository import ApprovalRepository
from newsnexus.repositories.state_assignment_repository import StateAssignmentRepository
from newsnexus.services.base_service import BaseService


def is_truthy_approval(value: Any) -> bool:
    """Storage may hand booleans back as 0/1."""
    return value is True or (not isinstance(value, bool) and value == 1)


def format_state_assignment_rows(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    return [
        {
            "id": row["article_id"],
            "title": row["title"],
            "description": row["description"],
            "url": row["url"],
            "createdAt": row["created_at"],
            "stateAssignment": {
                "promptId": row["prompt_id"],
                "isHumanApproved": row["is_human_approved"],
                "isDeterminedToBeError": row["is_determined_to_be_error"],
                "occuredInTheUS": row["occurred_in_the_us"],
                "reasoning": row["reasoning"],
                "stateId": row["state_id"],
                "stateName": row["state_name"],
            },
        }
        for row in rows
    ]


def group_report_rows(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Group flat report rows by article.

    The first row seen for an article supplies its scalar fields. ``States``
    is deduplicated by state id and ``ArticleApproveds`` by approval id; both
    are always lists.
    """
    articles: Dict[int, Dict[str, Any]] = {}

    for row in rows:
        article_id = row["article_id"]
        article = articles.get(article_id)
        if article is None:
            article = {
                "id": article_id,
                "title": row.get("title"),
                "description": row.get("description"),
                "publishedDate": row.get("published_date"),
                "createdAt": row.get("created_at"),
                "publicationName": row.get("publication_name"),
                "url": row.get("url"),
                "author": row.get("author"),
                "urlToImage": row.get("url_to_image"),
                "entityWhoFoundArticleId": row.get("entity_who_found_article_id"),
                "newsApiRequestId": row.get("news_api_request_id"),
                "States": [],
                "ArticleApproveds": [],
            }
            articles[article_id] = article

        state_id = row.get("state_id")
        if state_id is not None and not any(s["id"] == state_id for s in article["States"]):
            article["States"].append(
                {
                    "id": state_id,
                    "name": row.get("state_name"),
                    "abbreviation": row.get("state_abbreviation"),
                }
            )

        approved_id = row.get("approved_id")
        if approved_id is not None and not any(
            a["id"] == approved_id for a in article["ArticleApproveds"]
        ):
            article["ArticleApproveds"].append(
                {
                    "id": approved_id,
                    "artificialIntelligenceId": row.get("approved_by_ai_id"),
                    "userId": row.get("approved_by_user_id"),
                    "createdAt": row.get("approved_at"),
                    "isApproved": row.get("is_approved"),
                    "headlineForPdfReport": row.get("headline_for_pdf_report"),
                    "publicationNameForPdfReport": row.get("publication_name_for_pdf_report"),
                    "publicationDateForPdfReport": row.get("publication_date_for_pdf_report"),
                    "textForPdfReport": row.get("text_for_pdf_report"),
                    "urlForPdfReport": row.get("url_for_pdf_report"),
                    "kmNotes": row.get("km_notes"),
                }
            )

    return list(articles.values())


def state_abbreviation(states: List[Dict[str, Any]]) -> str:
    return ", ".join(s.get("abbreviation") or "" for s in states)


def filter_approved(articles: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Keep articles with at least one truthy approval; add ``stateAbbreviation``."""
    return [
        {**article, "stateAbbreviation": state_abbreviation(article["States"])}
        for article in articles
        if any(is_truthy_approval(a["isApproved"]) for a in article["ArticleApproveds"])
    ]


class ReportingService(BaseService):
    """Read-only queries over articles, state assignments and approvals.

    ``execute`` lists state assignments; the approved report is a separate
    read that only shares the retry handling.
    """

    def __init__(self, session: AsyncSession, logger: Optional[logging.Logger] = None, **kwargs):
        super().__init__(session, logger=logger, **kwargs)
        self.assignments = StateAssignmentRepository(session)
        self.approvals = ApprovalRepository(session)

    async def list_articles_with_state_assignments(
        self, include_null_state: bool = False
    ) -> List[Dict[str, Any]]:
        """List articles with their AI state proposals.

        Args:
            include_null_state: Return only proposals without a state when
                True, only proposals with a state otherwise
        """
        return await self.execute(include_null_state)

    def validate(self, include_null_state):
        if include_null_state is not None and not isinstance(include_null_state, bool):
            raise ValidationError("includeNullState must be a boolean value if provided")

    async def run(self, include_null_state: Optional[bool]) -> List[Dict[str, Any]]:
        include_null_state = bool(include_null_state)
        self.logger.info(
            "Listing articles with state assignments",
            extra={"include_null_state": include_null_state},
        )
        try:
            rows = await self.assignments.list_with_articles(include_null_state)
        except SQLAlchemyError as e:
            raise self._persistence_error("Failed to list state assignments", e) from e
        return format_state_assignment_rows(rows)

    async def list_approved_articles_report(self) -> List[Dict[str, Any]]:
        """Articles with confirmed states that have a truthy human approval."""
        return await self._call(self._build_approved_report)

    async def _build_approved_report(self) -> List[Dict[str, Any]]:
        try:
            rows = await self.approvals.report_rows()
        except SQLAlchemyError as e:
            raise self._persistence_error("Failed to build approved articles report", e) from e

        articles = group_report_rows(rows)
        approved = filter_approved(articles)
        self.logger.info(
            "Built approved articles report",
            extra={"articles_total": len(articles), "articles_approved": len(approved)},
        )
        return approved
