"""Map aggregator payloads to canonical ``ArticleItem`` objects."""

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, List, Optional

from newsnexus.services.ingestion.contracts import ArticleItem


def parse_pub_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO-8601 (NewsAPI, GNews) or RFC-822 (RSS) date.

    Naive results are taken as UTC.

    Raises:
        ValueError: If the value matches neither format
    """
    if value is None or not str(value).strip():
        return None
    raw = str(value).strip()

    try:
        parsed = datetime.fromisoformat(raw.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(raw)
        except (TypeError, ValueError) as e:
            raise ValueError(f"Unrecognized date: {raw}") from e
        if parsed is None:
            raise ValueError(f"Unrecognized date: {raw}")

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _source_name(source: Any) -> Optional[str]:
    if isinstance(source, dict):
        return source.get("name") or source.get("title")
    if isinstance(source, str):
        return source
    return None


def normalize_news_api_article(article: Dict[str, Any]) -> ArticleItem:
    """NewsAPI ``/v2/everything`` article to ArticleItem."""
    return ArticleItem(
        link=article.get("url"),
        title=article.get("title"),
        description=article.get("description"),
        content=article.get("content"),
        pub_date=article.get("publishedAt"),
        source=_source_name(article.get("source")),
        author=article.get("author"),
        url_to_image=article.get("urlToImage"),
    )


def normalize_gnews_article(article: Dict[str, Any]) -> ArticleItem:
    """GNews ``/api/v4/search`` article to ArticleItem."""
    return ArticleItem(
        link=article.get("url"),
        title=article.get("title"),
        description=article.get("description"),
        content=article.get("content"),
        pub_date=article.get("publishedAt"),
        source=_source_name(article.get("source")),
        url_to_image=article.get("image"),
    )


def normalize_rss_entry(entry: Any) -> ArticleItem:
    """feedparser entry to ArticleItem.

    Google News puts the publisher in ``<source>``; feedparser exposes it as
    ``entry.source.title``.
    """
    content = None
    contents = entry.get("content") or []
    if contents:
        content = contents[0].get("value")

    return ArticleItem(
        link=entry.get("link"),
        title=entry.get("title"),
        description=entry.get("summary") or entry.get("description"),
        content=content,
        pub_date=entry.get("published") or entry.get("updated"),
        source=_source_name(entry.get("source")),
        author=entry.get("author"),
    )


def normalize_articles(payload: Dict[str, Any], aggregator: str) -> List[ArticleItem]:
    """Normalize the ``articles`` list of a NewsAPI or GNews response."""
    normalizer = normalize_news_api_article if aggregator == "NewsAPI" else normalize_gnews_article
    return [normalizer(article) for article in payload.get("articles") or []]
