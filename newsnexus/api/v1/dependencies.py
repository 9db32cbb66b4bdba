"""Dependency providers for services and aggregator clients.

Routes depend on these functions, so tests swap implementations through
``app.dependency_overrides``.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from newsnexus.core.config import settings
from newsnexus.core.database import get_async_session as get_session
from newsnexus.services.admin_service import AdminService
from newsnexus.services.content_approval_service import ContentApprovalService
from newsnexus.services.ingestion.fetchers import GNewsClient, GoogleRssFetcher, NewsApiClient
from newsnexus.services.ingestion.ingestion_service import IngestionService
from newsnexus.services.reporting_service import ReportingService
from newsnexus.services.state_assignment_service import StateAssignmentService

SessionDep = Annotated[AsyncSession, Depends(get_session)]


async def get_state_assignment_service(db_session: SessionDep) -> StateAssignmentService:
    return StateAssignmentService(db_session)


async def get_content_approval_service(db_session: SessionDep) -> ContentApprovalService:
    return ContentApprovalService(db_session)


async def get_reporting_service(db_session: SessionDep) -> ReportingService:
    return ReportingService(db_session)


async def get_ingestion_service(db_session: SessionDep) -> IngestionService:
    return IngestionService(db_session)


async def get_admin_service(db_session: SessionDep) -> AdminService:
    return AdminService(db_session)


def get_google_rss_fetcher() -> GoogleRssFetcher:
    return GoogleRssFetcher(
        settings.aggregators.google_rss_url,
        timeout=settings.aggregators.request_timeout,
    )


def get_news_api_client() -> NewsApiClient:
    return NewsApiClient(
        settings.aggregators.news_api_key,
        settings.aggregators.news_api_url,
        timeout=settings.aggregators.request_timeout,
    )


def get_gnews_client() -> GNewsClient:
    return GNewsClient(
        settings.aggregators.gnews_api_key,
        settings.aggregators.gnews_api_url,
        timeout=settings.aggregators.request_timeout,
    )
