"""Repository layer modules."""

from newsnexus.repositories.approval_repository import ApprovalRepository
from newsnexus.repositories.article_repository import ArticleRepository
from newsnexus.repositories.ingestion_repository import (
    AggregatorSourceRepository,
    IngestionRequestRepository,
)
from newsnexus.repositories.state_assignment_repository import StateAssignmentRepository

__all__ = [
    "AggregatorSourceRepository",
    "ApprovalRepository",
    "ArticleRepository",
    "IngestionRequestRepository",
    "StateAssignmentRepository",
]
