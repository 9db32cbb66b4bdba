"""NewsAPI, GNews and ingestion-request listing endpoints."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request

from newsnexus.api.v1.dependencies import (
    get_gnews_client,
    get_ingestion_service,
    get_news_api_client,
)
from newsnexus.core.auth import get_current_user
from newsnexus.core.config import settings
from newsnexus.schemas.auth import CurrentUser
from newsnexus.schemas.ingestion import AggregatorSearchRequest
from newsnexus.services.ingestion.contracts import Provenance
from newsnexus.services.ingestion.fetchers import GNewsClient, NewsApiClient
from newsnexus.services.ingestion.ingestion_service import IngestionService
from newsnexus.utils.logging import get_logger
from newsnexus.utils.responses import create_api_response

LOGGER = get_logger(__name__)

news_api_router = APIRouter()
gnews_router = APIRouter()
router = APIRouter()


async def _search_and_ingest(
    request: Request,
    body: AggregatorSearchRequest,
    client: Any,
    ingestion_service: IngestionService,
) -> dict:
    max_articles = body.max or settings.aggregators.max_articles_per_request
    params = client.build_params(
        body.keyword_string, body.start_date.isoformat(), body.end_date.isoformat(), max_articles
    )
    request_url = client.request_url(params)

    if not settings.aggregators.activate_outside_requests:
        LOGGER.info(
            f"ACTIVATE_API_REQUESTS_TO_OUTSIDE_SOURCES is false; not calling {client.ORG_NAME}",
            extra={"url": request_url},
        )
        return create_api_response(
            data={"requestUrl": request_url, "sent": False},
            message=f"Outside requests are disabled; {client.ORG_NAME} request not sent",
            request=request,
        )

    source_id, entity_id = await ingestion_service.ensure_aggregator_source_and_entity(
        client.ORG_NAME, is_api=True
    )
    provenance = Provenance(
        aggregator_source_id=source_id,
        entity_who_found_article_id=entity_id,
        request_url=request_url,
        and_string=body.keyword_string,
        date_start_of_request=body.start_date,
        date_end_of_request=body.end_date,
        is_from_automation=False,
    )
    result = await ingestion_service.search_and_ingest(client, params, provenance)

    return create_api_response(
        data={**result.to_dict(), "requestUrl": request_url, "sent": True},
        message=(
            f"Imported {result.articles_saved} of {result.articles_received} "
            f"articles from {client.ORG_NAME}"
        ),
        request=request,
    )


@news_api_router.post(
    "/request",
    response_model=dict,
    summary="Search NewsAPI and store new articles",
    operation_id="news_api_request",
)
async def news_api_request(
    request: Request,
    body: AggregatorSearchRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    client: Annotated[NewsApiClient, Depends(get_news_api_client)],
    ingestion_service: Annotated[IngestionService, Depends(get_ingestion_service)],
) -> dict:
    """Search NewsAPI for ``keywordString`` between ``startDate`` and ``endDate``."""
    return await _search_and_ingest(request, body, client, ingestion_service)


@gnews_router.post(
    "/request",
    response_model=dict,
    summary="Search GNews and store new articles",
    operation_id="gnews_request",
)
async def gnews_request(
    request: Request,
    body: AggregatorSearchRequest,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    client: Annotated[GNewsClient, Depends(get_gnews_client)],
    ingestion_service: Annotated[IngestionService, Depends(get_ingestion_service)],
) -> dict:
    """Search GNews for ``keywordString`` between ``startDate`` and ``endDate``."""
    return await _search_and_ingest(request, body, client, ingestion_service)


@router.get(
    "/requests",
    response_model=dict,
    summary="List ingestion requests",
    operation_id="list_ingestion_requests",
)
async def list_ingestion_requests(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    ingestion_service: Annotated[IngestionService, Depends(get_ingestion_service)],
) -> dict:
    """Every ingestion request with its aggregator name, newest first."""
    requests = await ingestion_service.list_requests()
    return create_api_response(
        data={"count": len(requests), "newsApiRequestsArray": requests},
        message=f"Retrieved {len(requests)} ingestion requests",
        request=request,
    )
