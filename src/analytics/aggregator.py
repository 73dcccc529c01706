"""
Dashboard Analytics Aggregation

Derives the dashboard summary from raw order records:
- Revenue, average order value and conversion rate
- Revenue and order count for each of the trailing calendar months
- Best selling products by cumulative sales amount

Everything here is a pure function of its inputs and ``now``; the summary
is recomputed in full on every call.
"""

from datetime import datetime
from typing import List, Sequence

import polars as pl
from babel.dates import format_date

from src.schemas.analytics import AnalyticsSummary, MonthlySales, TopProduct
from src.schemas.orders import CountStats, Order, OrderItem
from src.utils import month_key, shift_months

UNKNOWN_PRODUCT = "Unknown Product"

ORDER_SCHEMA = {"created_at": pl.Utf8, "total_price": pl.Float64}
ITEM_SCHEMA = {"name": pl.Utf8, "price": pl.Float64, "quantity": pl.Int64}


def item_display_name(item: OrderItem) -> str:
    """Arabic name, else English name, else a placeholder"""
    if item.product is None:
        return UNKNOWN_PRODUCT
    return item.product.name_ar or item.product.name_en or UNKNOWN_PRODUCT


def orders_frame(orders: Sequence[Order]) -> pl.DataFrame:
    return pl.DataFrame(
        {
            "created_at": [order.created_at for order in orders],
            "total_price": [order.total_price for order in orders],
        },
        schema=ORDER_SCHEMA,
    )


def items_frame(orders: Sequence[Order]) -> pl.DataFrame:
    """One row per order line, in order then line sequence"""
    items = [item for order in orders for item in order.order_items]
    return pl.DataFrame(
        {
            "name": [item_display_name(item) for item in items],
            "price": [item.price for item in items],
            "quantity": [item.quantity for item in items],
        },
        schema=ITEM_SCHEMA,
    )


def _revenue(df: pl.DataFrame) -> float:
    return float(df["total_price"].sum()) if df.height else 0.0


def month_label(value: datetime, locale: str) -> str:
    """Localized short month and year, e.g. "Jan 2024" for en_US"""
    return format_date(value.date(), format="MMM y", locale=locale)


def monthly_sales(
    orders_df: pl.DataFrame,
    now: datetime,
    months: int = 6,
    locale: str = "ar_EG",
) -> List[MonthlySales]:
    """
    Revenue and order count of the ``months`` calendar months ending with
    the current one, oldest first.

    Orders are matched on the ``YYYY-MM`` prefix of their stored
    ``created_at`` text.
    """
    current_month = now.replace(day=1)
    series = []

    for offset in range(months):
        month_start = shift_months(current_month, -offset)
        key = month_key(month_start)
        matched = orders_df.filter(pl.col("created_at").str.starts_with(key))
        series.append(
            MonthlySales(
                month_key=key,
                month=month_label(month_start, locale),
                revenue=_revenue(matched),
                orders=matched.height,
            )
        )

    series.reverse()
    return series


def top_products(items_df: pl.DataFrame, limit: int = 5) -> List[TopProduct]:
    """
    Products ranked by cumulative ``price * quantity``.

    Lines are grouped by display name. Equal sales keep the order in which
    the names were first seen.
    """
    ranking = (
        items_df.group_by("name", maintain_order=True)
        .agg(
            (pl.col("price") * pl.col("quantity")).sum().alias("sales"),
            pl.col("quantity").sum().alias("quantity"),
        )
        .sort("sales", descending=True, maintain_order=True)
        .head(limit)
    )
    return [TopProduct(**row) for row in ranking.iter_rows(named=True)]


def build_summary(
    order_stats: CountStats,
    orders: Sequence[Order],
    product_stats: CountStats,
    user_stats: CountStats,
    now: datetime,
    months: int = 6,
    top_limit: int = 5,
    locale: str = "ar_EG",
) -> AnalyticsSummary:
    """
    Build the dashboard summary.

    Args:
        order_stats: Authoritative order count
        orders: Fetched page of orders; revenue figures cover only these
        product_stats: Catalog size
        user_stats: Customer count
        now: Reference time for the monthly series
    """
    orders_df = orders_frame(orders)
    fetched = orders_df.height

    total_revenue = _revenue(orders_df)
    average_order_value = total_revenue / fetched if fetched > 0 else 0.0

    # Orders per customer, expressed as a percentage
    conversion_rate = (fetched / user_stats.total) * 100 if user_stats.total > 0 else 0.0

    return AnalyticsSummary(
        total_revenue=total_revenue,
        total_orders=order_stats.total,
        total_customers=user_stats.total,
        total_products=product_stats.total,
        average_order_value=average_order_value,
        conversion_rate=conversion_rate,
        sales_by_month=monthly_sales(orders_df, now, months=months, locale=locale),
        top_products=top_products(items_frame(orders), limit=top_limit),
        orders_truncated=order_stats.total > fetched,
    )
