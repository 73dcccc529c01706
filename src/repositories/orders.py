"""
Order Repository

Read access to orders for the dashboard.
"""

from typing import Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.orm import selectinload

from src.database.models import Order as OrderRow
from src.database.models import OrderItem as OrderItemRow
from src.schemas.orders import CountStats, Order, OrderPage
from .exceptions import RepositoryError

logger = structlog.get_logger(__name__)


class OrderRepository:
    """Order reads: counts and pages of orders with their lines"""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]):
        self._session_factory = session_factory

    async def get_stats(self) -> CountStats:
        """Authoritative number of orders"""
        try:
            async with self._session_factory() as session:
                total = (await session.execute(select(func.count(OrderRow.id)))).scalar()
        except SQLAlchemyError as e:
            logger.error("Failed to count orders", error=str(e))
            raise RepositoryError("Could not load order statistics") from e
        return CountStats(total=total or 0)

    async def list(self, page: int = 1, page_size: int = 10, status: Optional[str] = None) -> OrderPage:
        """
        One page of orders, newest first.

        Each line carries the names of its product so callers can label it
        without a second lookup.
        """
        if page < 1:
            raise ValueError("page must be >= 1")
        if page_size <= 0:
            raise ValueError("page_size must be > 0")

        query = select(OrderRow).options(
            selectinload(OrderRow.order_items).selectinload(OrderItemRow.product)
        )
        count_query = select(func.count(OrderRow.id))
        if status:
            query = query.where(OrderRow.status == status)
            count_query = count_query.where(OrderRow.status == status)

        query = (
            query.order_by(OrderRow.created_at.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )

        try:
            async with self._session_factory() as session:
                total = (await session.execute(count_query)).scalar() or 0
                rows = (await session.execute(query)).scalars().all()
        except SQLAlchemyError as e:
            logger.error("Failed to load orders", page=page, error=str(e))
            raise RepositoryError("Could not load orders") from e

        return OrderPage(orders=[Order.model_validate(row) for row in rows], total=total)
