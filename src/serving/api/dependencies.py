"""
FastAPI Dependencies

Wire repositories and services to the shared engine and storage client.
Tests override these through ``app.dependency_overrides``.
"""

from fastapi import Depends

from src.analytics import AnalyticsService
from src.database.connection import get_session_factory
from src.repositories import OrderRepository, ProductRepository, UserRepository
from src.storage import get_storage


def get_product_repository() -> ProductRepository:
    return ProductRepository(get_session_factory(), get_storage())


def get_order_repository() -> OrderRepository:
    return OrderRepository(get_session_factory())


def get_user_repository() -> UserRepository:
    return UserRepository(get_session_factory())


def get_analytics_service(
    orders: OrderRepository = Depends(get_order_repository),
    products: ProductRepository = Depends(get_product_repository),
    users: UserRepository = Depends(get_user_repository),
) -> AnalyticsService:
    return AnalyticsService(orders, products, users)
