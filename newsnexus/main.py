"""NewsNexus API application."""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncGenerator, List
from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from sqlalchemy.exc import SQLAlchemyError

from newsnexus.api.errors import register_exception_handlers
from newsnexus.api.v1.endpoints import health
from newsnexus.api.v1.router import api_router
from newsnexus.core.config import settings
from newsnexus.core.database import close_database, init_database
from newsnexus.utils.logging import get_logger

LOGGER = get_logger(__name__, level=settings.log_level)

CORRELATION_HEADER = "X-Correlation-ID"


class ServiceInfo(BaseModel):
    """Payload returned by ``GET /``."""

    message: str = Field(..., description="Service status message")
    version: str = Field(..., description="Running application version")
    outside_requests: bool = Field(
        ..., description="Whether aggregator calls leave the process"
    )
    docs: str = Field(default="/docs")
    health: str = Field(default="/health")


def configuration_problems() -> List[str]:
    """Return human-readable warnings about missing runtime credentials."""
    problems = []
    if not settings.auth.jwt_secret:
        problems.append("JWT_SECRET is missing; authenticated routes will fail")
    aggregators = settings.aggregators
    if aggregators.activate_outside_requests:
        if not aggregators.news_api_key:
            problems.append("NEWS_API_KEY is missing while outside requests are enabled")
        if not aggregators.gnews_api_key:
            problems.append("GNEWS_API_KEY is missing while outside requests are enabled")
    return problems


async def _prepare_database() -> None:
    try:
        await asyncio.wait_for(
            init_database(auto_migrate=settings.db.auto_migrate, drop_existing=False),
            timeout=settings.db_init_timeout,
        )
    except asyncio.TimeoutError:
        LOGGER.error(
            "Database not ready in time",
            extra={"timeout_seconds": settings.db_init_timeout},
        )
    except (SQLAlchemyError, OSError) as e:
        LOGGER.error("Database preparation failed", exc_info=True, extra={"error": str(e)})
    else:
        LOGGER.info("Database ready", extra={"auto_migrate": settings.db.auto_migrate})


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    for problem in configuration_problems():
        LOGGER.warning(problem)

    LOGGER.info(
        "NewsNexus starting",
        extra={
            "version": settings.app_version,
            "environment": settings.environment,
            "outside_requests": settings.aggregators.activate_outside_requests,
        },
    )
    await _prepare_database()

    yield

    LOGGER.info("NewsNexus stopping")
    try:
        await close_database()
    except SQLAlchemyError as e:
        LOGGER.error("Could not dispose database engine", exc_info=True, extra={"error": str(e)})


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    description="News curation back-end: aggregator ingestion, state assignment review and reporting",
    lifespan=lifespan,
)

register_exception_handlers(app)


@app.middleware("http")
async def bind_request_id(request: Request, call_next):
    """Propagate the caller's correlation id, minting one when absent."""
    request_id = request.headers.get(CORRELATION_HEADER) or str(uuid4())
    request.state.correlation_id = request_id
    request.state.request_id = request_id
    response = await call_next(request)
    response.headers[CORRELATION_HEADER] = request_id
    return response


# Registered last so it is the outermost layer
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["*"],
    expose_headers=[CORRELATION_HEADER],
)

app.include_router(api_router, prefix=settings.api_v1_prefix)
app.include_router(health.router, prefix="/health", tags=["Health"])


@app.get("/", response_model=ServiceInfo, tags=["Root"], operation_id="get_service_info")
async def root() -> ServiceInfo:
    return ServiceInfo(
        message="Server is running",
        version=settings.app_version,
        outside_requests=settings.aggregators.activate_outside_requests,
    )


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "newsnexus.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
