"""
Test Suite Configuration
"""
from decimal import Decimal
from typing import AsyncGenerator, Callable, List, Optional

import pytest
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from salesviz.aggregation import ColorAssigner, SalesPerson, SalesRecord
from salesviz.config.settings import DEFAULT_PALETTE, DEFAULT_SALESPERSON_COLORS
from salesviz.database.models import Base


def _record(
    id: str,
    date: str,
    amount,
    sales_person: str = "松澤",
    customer_name: str = "Acme",
    product_name: str = "Widget",
    category: Optional[str] = "Hardware",
    quantity: int = 1,
) -> SalesRecord:
    return SalesRecord(
        id=id,
        date=date,
        customer_name=customer_name,
        product_name=product_name,
        sales_person=sales_person,
        quantity=quantity,
        unit_price=Decimal(str(amount)),
        total_amount=Decimal(str(amount)),
        category=category,
    )


@pytest.fixture
def make_record() -> Callable[..., SalesRecord]:
    """Factory for SalesRecord instances"""
    return _record


@pytest.fixture
def colors() -> ColorAssigner:
    return ColorAssigner(DEFAULT_PALETTE, DEFAULT_SALESPERSON_COLORS)


@pytest.fixture
def sample_records() -> List[SalesRecord]:
    """Two weeks of mixed records, ordered ascending by date"""
    return [
        _record("r1", "2024-01-01", 100, "松澤", "Acme", "Widget", "Hardware"),
        _record("r2", "2024-01-01", 50, "坂口", "Globex", "Gadget", None),
        _record("r3", "2024-01-03", 300, "松澤", "Initech", "Service Pack", "Services"),
        _record("r4", "2024-01-08", 200, "斉藤", "Acme", "Widget", "Hardware"),
        _record("r5", "2024-01-14", 75, "坂口", "Umbrella", "Gadget", "Hardware"),
        _record("r6", "2024-02-02", 125, "新人", "Globex", "Service Pack", "Services"),
    ]


@pytest.fixture
def sample_person() -> SalesPerson:
    return SalesPerson(
        name="松澤",
        department="営業1部",
        email="matsuzawa@example.com",
        monthly_target=Decimal("800"),
        quarterly_target=Decimal("2400"),
        hire_date="2019-04-01",
    )


class FakeStore:
    """In-memory stand-in for SalesStore"""

    def __init__(self, records=None, people=None):
        self.records: List[SalesRecord] = list(records or [])
        self.people = {p.name: p for p in (people or [])}
        self.fail_with: Optional[Exception] = None
        self.fetch_all_calls = 0

    async def fetch_all(self, sales_person: Optional[str] = None) -> List[SalesRecord]:
        self.fetch_all_calls += 1
        if self.fail_with is not None:
            raise self.fail_with
        if sales_person is None:
            return list(self.records)
        return [r for r in self.records if r.sales_person == sales_person]

    async def fetch_one(self, name: str) -> Optional[SalesPerson]:
        if self.fail_with is not None:
            raise self.fail_with
        return self.people.get(name)


@pytest.fixture
def fake_store(sample_records, sample_person) -> FakeStore:
    return FakeStore(sample_records, [sample_person])


@pytest.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory database engine with the sales tables created"""
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(test_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
def store_factory() -> Callable[..., FakeStore]:
    """Factory for in-memory stores with custom contents"""
    return FakeStore
