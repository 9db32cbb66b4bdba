"""Request schemas for the aggregator routes."""

from datetime import date
from typing import Any, List, Optional

from pydantic import Field, ValidationInfo, field_validator, model_validator

from newsnexus.schemas.common import SanitizedModel
from newsnexus.services.ingestion.contracts import ArticleItem


class GoogleRssQueryRequest(SanitizedModel):
    """Keyword parameters for a Google News RSS search."""

    and_keywords: Optional[str] = None
    and_exact_phrases: Optional[str] = None
    or_keywords: Optional[str] = None
    or_exact_phrases: Optional[str] = None
    time_range: Optional[str] = None

    @model_validator(mode="after")
    def _require_terms(self) -> "GoogleRssQueryRequest":
        if not any(
            (self.and_keywords, self.and_exact_phrases, self.or_keywords, self.or_exact_phrases)
        ):
            raise ValueError(
                "At least one of and_keywords, and_exact_phrases, or_keywords, "
                "or_exact_phrases must be provided"
            )
        return self


class RssArticle(SanitizedModel):
    """One item as returned by ``/google-rss/make-request``."""

    title: Optional[str] = None
    link: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    pub_date: Optional[str] = Field(default=None, alias="pubDate")
    source: Optional[str] = None

    def to_item(self) -> ArticleItem:
        return ArticleItem(
            link=self.link,
            title=self.title,
            description=self.description,
            content=self.content,
            pub_date=self.pub_date,
            source=self.source,
        )


class GoogleRssAddRequest(SanitizedModel):
    """Body of ``/google-rss/add-to-database``."""

    articles_array: Optional[List[RssArticle]] = Field(default=None, alias="articlesArray")
    url: Optional[Any] = None
    and_keywords: Optional[str] = None
    and_exact_phrases: Optional[str] = None
    or_keywords: Optional[str] = None
    or_exact_phrases: Optional[str] = None
    time_range: Optional[str] = None

    @model_validator(mode="after")
    def _check_articles(self) -> "GoogleRssAddRequest":
        if not self.articles_array:
            raise ValueError("articlesArray must be a non-empty array")
        if not self.url or not isinstance(self.url, str):
            raise ValueError("url is required and must be a string")
        for article in self.articles_array:
            if not article.title or not article.link:
                raise ValueError("Each article must have at least title and link fields")
            if not article.description and not article.content:
                raise ValueError("Each article must have at least one of description or content")
        return self


class AggregatorSearchRequest(SanitizedModel):
    """Body of ``/news-api/request`` and ``/gnews/request``."""

    start_date: Optional[date] = Field(default=None, alias="startDate")
    end_date: Optional[date] = Field(default=None, alias="endDate")
    keyword_string: Optional[str] = Field(default=None, alias="keywordString")
    max: Optional[int] = Field(default=None, ge=1, le=100)

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def _parse_day(cls, value: Any, info: ValidationInfo) -> Optional[date]:
        if value in (None, ""):
            return None
        if isinstance(value, date):
            return value
        alias = "startDate" if info.field_name == "start_date" else "endDate"
        try:
            return date.fromisoformat(str(value))
        except ValueError as e:
            raise ValueError(f"{alias} must be a date in YYYY-MM-DD format") from e

    @model_validator(mode="after")
    def _require_fields(self) -> "AggregatorSearchRequest":
        missing = [
            alias
            for alias, value in (
                ("startDate", self.start_date),
                ("endDate", self.end_date),
                ("keywordString", self.keyword_string),
            )
            if not value
        ]
        if missing:
            raise ValueError(f"Missing {', '.join(missing)}")
        if self.start_date > self.end_date:
            raise ValueError("startDate must not be after endDate")
        return self
