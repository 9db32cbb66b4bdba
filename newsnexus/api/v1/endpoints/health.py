"""Liveness probe reporting database reachability."""

from fastapi import APIRouter

from newsnexus.core.config import settings
from newsnexus.core.database import db_client
from newsnexus.schemas.common import HealthCheckResponse

router = APIRouter()


@router.get(
    "/",
    response_model=HealthCheckResponse,
    summary="Service health",
    operation_id="get_service_health_status",
)
async def health_check() -> HealthCheckResponse:
    # A down database degrades the service but the probe itself still answers 200
    database = await db_client.health_check()
    return HealthCheckResponse(
        status="healthy" if database["connected"] else "degraded",
        version=settings.app_version,
        service=settings.app_name,
        database=database,
    )
