"""
Analytics Schemas
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class MonthlySales(BaseModel):
    """Sales of one calendar month"""
    month_key: str  # YYYY-MM
    month: str  # localized label
    revenue: float
    orders: int


class TopProduct(BaseModel):
    """Cumulative sales of one product display name"""
    name: str
    sales: float
    quantity: int


class AnalyticsSummary(BaseModel):
    """
    Dashboard summary.

    ``total_orders`` is the authoritative order count, while revenue,
    average order value, conversion rate and the series only cover the
    fetched page of orders. ``orders_truncated`` is set when the two differ.
    """
    total_revenue: float = 0
    total_orders: int = 0
    total_customers: int = 0
    total_products: int = 0
    average_order_value: float = 0
    conversion_rate: float = 0
    sales_by_month: List[MonthlySales] = Field(default_factory=list)
    top_products: List[TopProduct] = Field(default_factory=list)
    orders_truncated: bool = False


class AnalyticsResponse(BaseModel):
    """Summary as served to the dashboard"""
    summary: AnalyticsSummary
    is_stale: bool = False
    error: Optional[str] = None
