"""
Database Seeding

Creates the sales tables, loads synthetic records and reference people, and
announces the change so running dashboards refresh.

Usage:
    python -m salesviz.ingestion.seed_db --records 500 --days 120
"""

import argparse
import asyncio
from typing import Any, Dict, List, Type

import structlog
from sqlalchemy import delete

from salesviz.config.logging import configure_logging
from salesviz.data.generators import SalesDataGenerator
from salesviz.database.connection import close_database, get_db, init_database
from salesviz.database.models import Base, SalesPersonRow, SalesRecordRow
from salesviz.ingestion.change_feed import publish_change

logger = structlog.get_logger(__name__)


async def insert_rows(model: Type[Base], rows: List[Dict[str, Any]], chunk_size: int = 1000) -> None:
    """Insert rows in chunks"""
    if not rows:
        return

    async with get_db() as db:
        for i in range(0, len(rows), chunk_size):
            db.add_all(model(**row) for row in rows[i:i + chunk_size])
            await db.flush()
    logger.info(f"Inserted {len(rows)} rows into {model.__tablename__}")


async def seed(records: int, days: int, reset: bool, notify: bool) -> None:
    engine = await init_database()
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        if reset:
            async with get_db() as db:
                await db.execute(delete(SalesRecordRow))
                await db.execute(delete(SalesPersonRow))
            logger.info("Existing sales data removed")

        generator = SalesDataGenerator()
        await insert_rows(SalesPersonRow, generator.generate_people())
        await insert_rows(SalesRecordRow, generator.generate_records(n=records, days=days))
    finally:
        await close_database()

    if notify:
        try:
            await publish_change()
        except Exception as e:
            logger.warning("Could not publish change notification", error=str(e))


def main() -> None:
    parser = argparse.ArgumentParser(description="Seed the sales dashboard database")
    parser.add_argument("--records", type=int, default=200, help="Number of sales records")
    parser.add_argument("--days", type=int, default=90, help="Spread records over this many days")
    parser.add_argument("--reset", action="store_true", help="Delete existing data first")
    parser.add_argument("--no-notify", action="store_true", help="Skip the change notification")
    args = parser.parse_args()

    configure_logging()
    asyncio.run(seed(args.records, args.days, args.reset, notify=not args.no_notify))


if __name__ == "__main__":
    main()
