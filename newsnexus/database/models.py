"""SQLAlchemy models for all database tables."""

from datetime import date, datetime

from sqlalchemy import (
    TIMESTAMP,
    Boolean,
    Date,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from newsnexus.core.database import Base


class User(Base):
    """Reviewer account referenced by approvals and discovering entities."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String, nullable=False)
    email: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    is_admin: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )


class NewsArticleAggregatorSource(Base):
    """External news provider (NewsAPI, GNews, Google News RSS, ...)."""

    __tablename__ = "news_article_aggregator_sources"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name_of_org: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    url: Mapped[str | None] = mapped_column(String, nullable=True)
    is_rss: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_api: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    requests: Mapped[list["IngestionRequest"]] = relationship(
        "IngestionRequest", back_populates="aggregator_source"
    )


class EntityWhoFoundArticle(Base):
    """Discovering entity: either an aggregator source or a user."""

    __tablename__ = "entity_who_found_articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id", ondelete="CASCADE"), nullable=True
    )
    news_article_aggregator_source_id: Mapped[int | None] = mapped_column(
        Integer,
        ForeignKey("news_article_aggregator_sources.id", ondelete="CASCADE"),
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )


class IngestionRequest(Base):
    """One external fetch attempt and its received/saved counts."""

    __tablename__ = "news_api_requests"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    news_article_aggregator_source_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("news_article_aggregator_sources.id"), nullable=True
    )
    url: Mapped[str | None] = mapped_column(Text, nullable=True)
    and_string: Mapped[str | None] = mapped_column(Text, nullable=True)
    or_string: Mapped[str | None] = mapped_column(Text, nullable=True)
    not_string: Mapped[str | None] = mapped_column(Text, nullable=True)
    date_start_of_request: Mapped[date | None] = mapped_column(Date, nullable=True)
    date_end_of_request: Mapped[date | None] = mapped_column(Date, nullable=True)
    count_of_articles_received_from_request: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0
    )
    count_of_articles_saved_to_db_from_request: Mapped[int | None] = mapped_column(
        Integer, nullable=True
    )
    status: Mapped[str] = mapped_column(
        String, nullable=False, default="success"
    )  # success | error
    is_from_automation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    aggregator_source: Mapped["NewsArticleAggregatorSource | None"] = relationship(
        "NewsArticleAggregatorSource", back_populates="requests"
    )


class Article(Base):
    """Ingested news article. ``url`` is the dedup key."""

    __tablename__ = "articles"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    title: Mapped[str] = mapped_column(Text, nullable=False, default="")
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    url: Mapped[str] = mapped_column(String, unique=True, nullable=False)
    published_date: Mapped[datetime | None] = mapped_column(
        TIMESTAMP(timezone=True), nullable=True
    )
    publication_name: Mapped[str] = mapped_column(String, nullable=False, default="Unknown")
    author: Mapped[str | None] = mapped_column(String, nullable=True)
    url_to_image: Mapped[str | None] = mapped_column(String, nullable=True)
    entity_who_found_article_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("entity_who_found_articles.id"), nullable=True
    )
    # Null means the article was added manually
    news_api_request_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("news_api_requests.id"), nullable=True
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    contents: Mapped[list["ArticleContent"]] = relationship(
        "ArticleContent", back_populates="article", cascade="all, delete-orphan"
    )


class ArticleContent(Base):
    """Body text captured alongside an ingested article."""

    __tablename__ = "article_contents"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False
    )
    content: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )

    article: Mapped["Article"] = relationship("Article", back_populates="contents")


class State(Base):
    """US state an article can be assigned to."""

    __tablename__ = "states"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    abbreviation: Mapped[str] = mapped_column(String(2), nullable=False)


class ArtificialIntelligence(Base):
    """AI system (model + prompt family) that writes proposals."""

    __tablename__ = "artificial_intelligences"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )


class AiStateProposal(Base):
    """AI-proposed state for an article, pending human review.

    Written by the external AI classifier. (article_id, state_id) is the
    natural key but is deliberately not constrained: duplicates must be
    detectable rather than impossible to insert.
    """

    __tablename__ = "ai_state_proposals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    # Null means the AI could not determine a state
    state_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("states.id"), nullable=True
    )
    prompt_id: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # None = pending, True = approved, False = rejected
    is_human_approved: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    is_determined_to_be_error: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False
    )
    occurred_in_the_us: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    reasoning: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )


class HumanStateConfirmation(Base):
    """Human-confirmed (article, state) pair. Existence means approved."""

    __tablename__ = "article_state_contracts"
    __table_args__ = (
        UniqueConstraint("article_id", "state_id", name="uq_article_state_contract"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False
    )
    state_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("states.id"), nullable=False
    )
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )


class AiArticleApproval(Base):
    """AI-drafted report text for an article, pending human approval."""

    __tablename__ = "ai_article_approvals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False, index=True
    )
    artificial_intelligence_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("artificial_intelligences.id"), nullable=True
    )
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    headline_for_pdf_report: Mapped[str | None] = mapped_column(Text, nullable=True)
    publication_name_for_pdf_report: Mapped[str | None] = mapped_column(Text, nullable=True)
    publication_date_for_pdf_report: Mapped[date | None] = mapped_column(Date, nullable=True)
    text_for_pdf_report: Mapped[str | None] = mapped_column(Text, nullable=True)
    url_for_pdf_report: Mapped[str | None] = mapped_column(Text, nullable=True)
    km_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )


class ArticleApproval(Base):
    """Human decision on an article's report text (one per article)."""

    __tablename__ = "article_approvals"
    __table_args__ = (
        UniqueConstraint("article_id", name="uq_article_approval_article"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    article_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("articles.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("users.id"), nullable=True
    )
    artificial_intelligence_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("artificial_intelligences.id"), nullable=True
    )
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    headline_for_pdf_report: Mapped[str | None] = mapped_column(Text, nullable=True)
    publication_name_for_pdf_report: Mapped[str | None] = mapped_column(Text, nullable=True)
    publication_date_for_pdf_report: Mapped[date | None] = mapped_column(Date, nullable=True)
    text_for_pdf_report: Mapped[str | None] = mapped_column(Text, nullable=True)
    url_for_pdf_report: Mapped[str | None] = mapped_column(Text, nullable=True)
    km_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True), server_default=func.now(), onupdate=func.now()
    )
