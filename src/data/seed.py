"""
Database Seeding

Fills an empty development database with generated demo data.

Usage:
    python -m src.data.seed --create-tables --orders 500
"""

import argparse
import asyncio
from typing import Any, Dict, List

import structlog
from sqlalchemy import insert
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.config.logging import configure_logging
from src.database.connection import get_engine, get_session_factory, init_database, close_database
from src.database.models import (
    Base,
    Category,
    Order,
    OrderItem,
    Product,
    ProductAttribute,
    Profile,
)
from .generators import DemoDataGenerator

logger = structlog.get_logger(__name__)

# Parents before children
INSERT_ORDER = [
    ("categories", Category),
    ("profiles", Profile),
    ("products", Product),
    ("product_attributes", ProductAttribute),
    ("orders", Order),
    ("order_items", OrderItem),
]

CHUNK_SIZE = 1000


async def seed_database(
    session_factory: async_sessionmaker[AsyncSession],
    data: Dict[str, List[Dict[str, Any]]],
) -> Dict[str, int]:
    """
    Insert generated records in a single transaction.

    Returns:
        Number of rows inserted per table
    """
    counts = {}
    async with session_factory() as session, session.begin():
        for table, model in INSERT_ORDER:
            records = data.get(table, [])
            for i in range(0, len(records), CHUNK_SIZE):
                await session.execute(insert(model), records[i:i + CHUNK_SIZE])
            counts[table] = len(records)
            logger.info("Seeded table", table=table, rows=len(records))
    return counts


async def main(args: argparse.Namespace) -> None:
    configure_logging()
    await init_database()

    try:
        if args.create_tables:
            async with get_engine().begin() as conn:
                await conn.run_sync(Base.metadata.create_all)
            logger.info("Tables created")

        data = DemoDataGenerator(seed=args.seed).generate_all(
            customers=args.customers,
            products=args.products,
            orders=args.orders,
        )
        counts = await seed_database(get_session_factory(), data)
        logger.info("Database seeding completed", **counts)
    finally:
        await close_database()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Seed the dashboard database with demo data")
    parser.add_argument("--create-tables", action="store_true", help="Create missing tables first")
    parser.add_argument("--customers", type=int, default=100)
    parser.add_argument("--products", type=int, default=50)
    parser.add_argument("--orders", type=int, default=300)
    parser.add_argument("--seed", type=int, default=42, help="Random seed")

    asyncio.run(main(parser.parse_args()))
