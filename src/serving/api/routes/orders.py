"""
Orders API Endpoints
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query

from src.database.models import OrderStatus
from src.repositories import OrderRepository
from src.schemas.orders import CountStats, OrderPage
from src.serving.api.dependencies import get_order_repository

router = APIRouter()


@router.get("", response_model=OrderPage)
async def list_orders(
    page: int = Query(1, ge=1),
    page_size: int = Query(10, ge=1, le=1000),
    status: Optional[OrderStatus] = None,
    repo: OrderRepository = Depends(get_order_repository),
) -> OrderPage:
    """List orders with their lines, newest first."""
    return await repo.list(page=page, page_size=page_size, status=status.value if status else None)


@router.get("/stats", response_model=CountStats)
async def get_order_stats(
    repo: OrderRepository = Depends(get_order_repository),
) -> CountStats:
    return await repo.get_stats()
