"""
Analytics Service

Loads the four inputs of the dashboard summary concurrently and derives the
summary from them. Any failed read aborts the whole computation.
"""

import asyncio
from datetime import datetime, timezone
from typing import Callable, Optional

import structlog

from src.config import get_settings
from src.config.settings import AnalyticsSettings
from src.repositories import OrderRepository, ProductRepository, RepositoryError, UserRepository
from src.schemas.analytics import AnalyticsSummary
from .aggregator import build_summary

logger = structlog.get_logger(__name__)


class AnalyticsUnavailableError(Exception):
    """The summary inputs could not be loaded"""


class AnalyticsService:
    """
    Example:
        service = AnalyticsService(order_repo, product_repo, user_repo)
        summary = await service.get_summary()
    """

    def __init__(
        self,
        orders: OrderRepository,
        products: ProductRepository,
        users: UserRepository,
        config: Optional[AnalyticsSettings] = None,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._orders = orders
        self._products = products
        self._users = users
        self._config = config or get_settings().analytics
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def get_summary(self) -> AnalyticsSummary:
        """
        Compute the dashboard summary.

        Raises:
            AnalyticsUnavailableError: If any of the reads failed
        """
        try:
            order_stats, order_page, product_stats, user_stats = await asyncio.gather(
                self._orders.get_stats(),
                self._orders.list(page=1, page_size=self._config.order_page_size),
                self._products.get_stats(),
                self._users.get_stats(),
            )
        except RepositoryError as e:
            logger.error("Failed to load analytics data", error=str(e), error_type=type(e).__name__)
            raise AnalyticsUnavailableError("Analytics data could not be loaded") from e

        summary = build_summary(
            order_stats,
            order_page.orders,
            product_stats,
            user_stats,
            now=self._clock(),
            months=self._config.months,
            top_limit=self._config.top_products,
            locale=self._config.locale,
        )

        if summary.orders_truncated:
            logger.warning(
                "Revenue figures cover a partial order history",
                fetched_orders=len(order_page.orders),
                total_orders=order_stats.total,
            )

        logger.info(
            "Analytics summary computed",
            total_revenue=summary.total_revenue,
            total_orders=summary.total_orders,
            total_customers=summary.total_customers,
        )
        return summary
