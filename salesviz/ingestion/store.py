"""
Sales Data Store

Read access to the sales tables:
- fetch_all(sales_person=None): cleaned records ordered ascending by date
- fetch_one(name): optional salesperson reference row
"""

from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from salesviz.aggregation.numeric import to_decimal
from salesviz.aggregation.records import SalesPerson, SalesRecord
from salesviz.database.connection import get_session_factory
from salesviz.database.models import SalesPersonRow, SalesRecordRow
from .cleaners import SalesRecordCleaner

logger = structlog.get_logger(__name__)


def _row_to_dict(row: SalesRecordRow) -> Dict[str, Any]:
    return {column.key: getattr(row, column.key) for column in SalesRecordRow.__table__.columns}


def _to_sales_person(row: SalesPersonRow) -> SalesPerson:
    return SalesPerson(
        name=row.name,
        department=row.department,
        email=row.email,
        monthly_target=to_decimal(row.monthly_target),
        quarterly_target=to_decimal(row.quarterly_target),
        hire_date=row.hire_date.isoformat() if row.hire_date else None,
    )


class SalesStore:
    """
    Sales data store backed by the async SQLAlchemy session factory.

    Example:
        store = SalesStore()
        records = await store.fetch_all()
        person = await store.fetch_one("松澤")
    """

    def __init__(
        self,
        session_factory: Optional[async_sessionmaker[AsyncSession]] = None,
        cleaner: Optional[SalesRecordCleaner] = None,
    ):
        self._session_factory = session_factory
        self.cleaner = cleaner or SalesRecordCleaner()

    def _sessions(self) -> async_sessionmaker[AsyncSession]:
        # Resolved lazily so the store can be built before init_database()
        return self._session_factory or get_session_factory()

    async def fetch_all(self, sales_person: Optional[str] = None) -> List[SalesRecord]:
        """
        Fetch all records, optionally only one salesperson's.

        Args:
            sales_person: Restrict to records with this salesperson name

        Returns:
            Cleaned records ordered ascending by date
        """
        stmt = select(SalesRecordRow).order_by(
            SalesRecordRow.date.asc(),
            SalesRecordRow.created_at.asc(),
            SalesRecordRow.id.asc(),
        )
        if sales_person is not None:
            # Names are trimmed at ingestion, so match the trimmed column
            stmt = stmt.where(func.trim(SalesRecordRow.sales_person) == sales_person.strip())

        async with self._sessions()() as session:
            result = await session.execute(stmt)
            rows = [_row_to_dict(row) for row in result.scalars()]

        records, stats = self.cleaner.clean(rows)
        logger.debug(
            "Fetched sales records",
            sales_person=sales_person,
            rows=stats.total_rows,
            records=len(records),
        )
        return records

    async def fetch_one(self, name: str) -> Optional[SalesPerson]:
        """Reference data for one salesperson, or None when no row exists"""
        async with self._sessions()() as session:
            result = await session.execute(
                select(SalesPersonRow).where(SalesPersonRow.name == name)
            )
            row = result.scalar_one_or_none()

        if row is None:
            logger.info("No reference data for salesperson", name=name)
            return None
        return _to_sales_person(row)
