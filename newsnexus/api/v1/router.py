from fastapi import APIRouter

from newsnexus.api.v1.endpoints import (
    admin_db,
    analysis,
    articles,
    articles_approveds,
    google_rss,
    news_aggregators,
    state_assigner,
)

# Create API router
api_router = APIRouter()

# Include routers
api_router.include_router(
    state_assigner.router, prefix="/analysis/state-assigner", tags=["State Assigner"]
)
api_router.include_router(analysis.router, prefix="/analysis", tags=["Analysis"])
api_router.include_router(articles.router, prefix="/articles", tags=["Articles"])
api_router.include_router(
    articles_approveds.router, prefix="/articles-approveds", tags=["Article Approvals"]
)
api_router.include_router(google_rss.router, prefix="/google-rss", tags=["Google RSS"])
api_router.include_router(news_aggregators.news_api_router, prefix="/news-api", tags=["NewsAPI"])
api_router.include_router(news_aggregators.gnews_router, prefix="/gnews", tags=["GNews"])
api_router.include_router(
    news_aggregators.router, prefix="/news-aggregators", tags=["News Aggregators"]
)
api_router.include_router(admin_db.router, prefix="/admin-db", tags=["Admin"])

__all__ = ["api_router"]
