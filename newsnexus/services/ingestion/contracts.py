"""Contracts (input/output schemas) for the ingestion pipeline."""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional


@dataclass
class ArticleItem:
    """Canonical article item produced by every aggregator normalizer."""
    link: Optional[str]
    title: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    pub_date: Optional[str] = None
    source: Optional[str] = None
    author: Optional[str] = None
    url_to_image: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ArticleItem":
        """Build from a wire dict using the RSS field names (``pubDate``)."""
        return cls(
            link=data.get("link"),
            title=data.get("title"),
            description=data.get("description"),
            content=data.get("content"),
            pub_date=data.get("pubDate") or data.get("pub_date"),
            source=data.get("source"),
            author=data.get("author"),
            url_to_image=data.get("urlToImage") or data.get("url_to_image"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "link": self.link,
            "description": self.description,
            "content": self.content,
            "pubDate": self.pub_date,
            "source": self.source,
            "author": self.author,
            "urlToImage": self.url_to_image,
        }


@dataclass
class Provenance:
    """Where a batch came from.

    ``request_id`` refers to an existing IngestionRequest; when it is None a
    new request row is created from the remaining fields.
    """
    aggregator_source_id: Optional[int]
    entity_who_found_article_id: Optional[int]
    request_id: Optional[int] = None
    request_url: Optional[str] = None
    and_string: Optional[str] = None
    or_string: Optional[str] = None
    not_string: Optional[str] = None
    date_start_of_request: Optional[date] = None
    date_end_of_request: Optional[date] = None
    is_from_automation: bool = False


@dataclass
class ItemFailure:
    """An item whose insert was rolled back."""
    link: str
    error: str


@dataclass
class IngestResult:
    """Outcome of one ingested batch.

    Every received item is counted exactly once: saved, duplicate, skipped
    for lacking a link, or failed.
    """
    request_id: int
    articles_received: int
    articles_saved: int
    article_ids: List[int] = field(default_factory=list)
    failures: List[ItemFailure] = field(default_factory=list)
    duplicates_skipped: int = 0
    skipped_without_link: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "requestId": self.request_id,
            "articlesReceived": self.articles_received,
            "articlesSaved": self.articles_saved,
            "articleIds": list(self.article_ids),
            "duplicatesSkipped": self.duplicates_skipped,
            "skippedWithoutLink": self.skipped_without_link,
            "failures": [{"link": f.link, "error": f.error} for f in self.failures],
        }
