"""Google News RSS endpoints: search without saving, then save selected items."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from newsnexus.api.v1.dependencies import get_google_rss_fetcher, get_ingestion_service
from newsnexus.core.auth import get_current_user
from newsnexus.core.config import settings
from newsnexus.schemas.auth import CurrentUser
from newsnexus.schemas.ingestion import GoogleRssAddRequest, GoogleRssQueryRequest
from newsnexus.services.ingestion.contracts import Provenance
from newsnexus.services.ingestion.fetchers import GoogleRssFetcher
from newsnexus.services.ingestion.ingestion_service import (
    GOOGLE_NEWS_RSS_ORG_NAME,
    IngestionService,
)
from newsnexus.services.ingestion.query_builder import build_query, build_rss_url, combine_for_db
from newsnexus.utils.logging import get_logger
from newsnexus.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


@router.post(
    "/make-request",
    response_model=dict,
    summary="Search Google News RSS without saving",
    operation_id="google_rss_make_request",
)
async def make_request(
    request: Request,
    body: GoogleRssQueryRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    fetcher: Annotated[GoogleRssFetcher, Depends(get_google_rss_fetcher)],
) -> dict:
    """Build the search URL, fetch the feed and return its items.

    Raises:
        503 UPSTREAM_RATE_LIMITED: Google News answered HTTP 503
    """
    query = build_query(
        and_keywords=body.and_keywords,
        and_exact_phrases=body.and_exact_phrases,
        or_keywords=body.or_keywords,
        or_exact_phrases=body.or_exact_phrases,
        time_range=body.time_range,
    )
    if query.time_range_invalid:
        LOGGER.warning(
            f"Invalid time_range {body.time_range!r}, using {query.time_range}",
            extra={"user_id": current_user.id},
        )

    aggregators = settings.aggregators
    url = build_rss_url(
        query.query,
        base_url=aggregators.google_rss_url,
        hl=aggregators.google_rss_hl,
        gl=aggregators.google_rss_gl,
        ceid=aggregators.google_rss_ceid,
    )

    items = await fetcher.fetch(url)

    return create_api_response(
        data={
            "url": url,
            "query": query.query,
            "timeRange": query.time_range,
            "timeRangeInvalid": query.time_range_invalid,
            "articlesArray": [item.to_dict() for item in items],
            "count": len(items),
        },
        message=f"Fetched {len(items)} articles from Google News RSS",
        request=request,
    )


@router.post(
    "/add-to-database",
    response_model=dict,
    summary="Save previously fetched Google News RSS items",
    operation_id="google_rss_add_to_database",
)
async def add_to_database(
    request: Request,
    body: GoogleRssAddRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ingestion_service: Annotated[IngestionService, Depends(get_ingestion_service)],
) -> dict:
    """Store the items as articles, skipping urls that already exist."""
    if "news.google.com/rss" not in body.url:
        LOGGER.warning(f"Unusual URL format (not Google News RSS): {body.url}")

    source_id, entity_id = await ingestion_service.ensure_aggregator_source_and_entity(
        GOOGLE_NEWS_RSS_ORG_NAME, is_rss=True
    )

    provenance = Provenance(
        aggregator_source_id=source_id,
        entity_who_found_article_id=entity_id,
        request_url=body.url,
        and_string=combine_for_db(body.and_keywords, body.and_exact_phrases),
        or_string=combine_for_db(body.or_keywords, body.or_exact_phrases),
        is_from_automation=False,
    )
    result = await ingestion_service.ingest_batch(
        [article.to_item() for article in body.articles_array], provenance
    )

    message = (
        f"Successfully saved {result.articles_saved} of {result.articles_received} "
        "articles to database"
    )
    skipped = result.duplicates_skipped
    if skipped > 0:
        message += f" ({skipped} duplicate{'s' if skipped > 1 else ''} skipped)"
    if result.skipped_without_link:
        message += f" ({result.skipped_without_link} without link skipped)"
    if result.failures:
        message += f" ({len(result.failures)} failed)"

    return create_api_response(data=result.to_dict(), message=message, request=request)
