"""
Sales Record Types

Immutable in-memory views of the rows owned by the data store. The
aggregation engine never mutates them.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Optional


UNCATEGORIZED = "Uncategorized"


class Granularity(str, Enum):
    """Time bucketing resolution"""
    DAY = "day"
    WEEK = "week"
    MONTH = "month"


@dataclass(frozen=True)
class SalesRecord:
    """A single sales transaction"""
    id: str
    date: str  # YYYY-MM-DD
    customer_name: str
    product_name: str
    sales_person: str
    quantity: int = 0
    unit_price: Decimal = Decimal("0")
    # Trusted as given; never reconciled against quantity * unit_price
    total_amount: Decimal = Decimal("0")
    category: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None

    @property
    def category_label(self) -> str:
        """Category resolved to the sentinel label when absent"""
        return self.category or UNCATEGORIZED


@dataclass(frozen=True)
class SalesPerson:
    """Reference data for one salesperson, joined to records by name"""
    name: str
    department: Optional[str] = None
    email: Optional[str] = None
    monthly_target: Decimal = Decimal("0")
    quarterly_target: Decimal = Decimal("0")
    hire_date: Optional[str] = None
