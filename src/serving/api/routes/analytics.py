"""
Analytics API Endpoints

Dashboard summary: headline metrics, monthly sales and best sellers.
"""

from typing import Optional

from fastapi import APIRouter, Depends
from redis.exceptions import RedisError
import structlog

from src.analytics import AnalyticsService, AnalyticsUnavailableError
from src.schemas.analytics import AnalyticsResponse, AnalyticsSummary
from src.serving.api.dependencies import get_analytics_service
from src.serving.cache import analytics_cache

router = APIRouter()
logger = structlog.get_logger(__name__)

SUMMARY_KEY = "summary"
UNAVAILABLE_MESSAGE = "Analytics are temporarily unavailable"


async def load_last_summary() -> Optional[AnalyticsSummary]:
    """Last summary served, if the cache holds one"""
    try:
        cached = await analytics_cache.get(SUMMARY_KEY)
    except (RedisError, RuntimeError) as e:
        logger.warning("Last-known summary unavailable", error=str(e))
        return None
    return AnalyticsSummary(**cached) if cached else None


async def store_last_summary(summary: AnalyticsSummary) -> None:
    try:
        await analytics_cache.set(SUMMARY_KEY, summary.model_dump())
    except (RedisError, RuntimeError) as e:
        logger.warning("Could not remember summary", error=str(e))


@router.get("/summary", response_model=AnalyticsResponse)
async def get_summary(
    service: AnalyticsService = Depends(get_analytics_service),
) -> AnalyticsResponse:
    """
    Dashboard summary.

    When the backend cannot be read the last summary served is returned
    instead (zeroed on first use), flagged as stale.
    """
    try:
        summary = await service.get_summary()
    except AnalyticsUnavailableError:
        logger.error("Serving last-known analytics summary")
        last = await load_last_summary()
        return AnalyticsResponse(
            summary=last or AnalyticsSummary(),
            is_stale=True,
            error=UNAVAILABLE_MESSAGE,
        )

    await store_last_summary(summary)
    return AnalyticsResponse(summary=summary)
