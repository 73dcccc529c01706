"""
Schemas Module
"""
from .products import (
    Base64Image,
    DateWindow,
    OperationResult,
    Product,
    ProductAttribute,
    ProductAttributeIn,
    ProductCreate,
    ProductFilters,
    ProductPage,
    ProductUpdate,
)
from .orders import (
    AdminProfile,
    CountStats,
    Order,
    OrderItem,
    OrderItemProduct,
    OrderPage,
    ProfileUpdate,
)
from .analytics import AnalyticsResponse, AnalyticsSummary, MonthlySales, TopProduct

__all__ = [
    "Base64Image",
    "DateWindow",
    "OperationResult",
    "Product",
    "ProductAttribute",
    "ProductAttributeIn",
    "ProductCreate",
    "ProductFilters",
    "ProductPage",
    "ProductUpdate",
    "AdminProfile",
    "CountStats",
    "Order",
    "OrderItem",
    "OrderItemProduct",
    "OrderPage",
    "ProfileUpdate",
    "AnalyticsResponse",
    "AnalyticsSummary",
    "MonthlySales",
    "TopProduct",
]
