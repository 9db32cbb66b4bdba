"""Database module for SQLAlchemy models."""

from newsnexus.database.models import (
    AiArticleApproval,
    AiStateProposal,
    Article,
    ArticleApproval,
    ArticleContent,
    ArtificialIntelligence,
    EntityWhoFoundArticle,
    HumanStateConfirmation,
    IngestionRequest,
    NewsArticleAggregatorSource,
    State,
    User,
)

__all__ = [
    "AiArticleApproval",
    "AiStateProposal",
    "Article",
    "ArticleApproval",
    "ArticleContent",
    "ArtificialIntelligence",
    "EntityWhoFoundArticle",
    "HumanStateConfirmation",
    "IngestionRequest",
    "NewsArticleAggregatorSource",
    "State",
    "User",
]
