"""
Analytics Module
"""
from .aggregator import build_summary, monthly_sales, top_products
from .service import AnalyticsService, AnalyticsUnavailableError

__all__ = [
    "build_summary",
    "monthly_sales",
    "top_products",
    "AnalyticsService",
    "AnalyticsUnavailableError",
]
