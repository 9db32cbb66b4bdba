"""Reporting endpoints."""

import time
from typing import Annotated

from fastapi import APIRouter, Depends, Request

from newsnexus.api.v1.dependencies import get_reporting_service
from newsnexus.core.auth import get_current_user
from newsnexus.schemas.auth import CurrentUser
from newsnexus.services.reporting_service import ReportingService
from newsnexus.utils.logging import get_logger
from newsnexus.utils.responses import create_api_response

LOGGER = get_logger(__name__)

router = APIRouter()


@router.get(
    "/llm04/approved",
    response_model=dict,
    summary="Approved articles with their confirmed states",
    operation_id="get_approved_articles_report",
)
async def get_approved_articles_report(
    request: Request,
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
    reporting_service: Annotated[ReportingService, Depends(get_reporting_service)],
) -> dict:
    """Articles that have at least one approved report text.

    Each article carries ``States``, ``ArticleApproveds`` and a
    ``stateAbbreviation`` summary.
    """
    start = time.perf_counter()
    articles = await reporting_service.list_approved_articles_report()
    elapsed = time.perf_counter() - start

    return create_api_response(
        data={
            "articlesArray": articles,
            "timeToRenderResponseFromApiInSeconds": round(elapsed, 3),
        },
        message=f"Retrieved {len(articles)} approved articles",
        request=request,
    )
