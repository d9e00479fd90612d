"""
View Model Composition

Combines the aggregation primitives into the view models the dashboard
renders:
- DashboardView: KPIs, period series, category breakdown, salesperson cards
- PersonDetail: one salesperson's performance joined with reference data

Everything here is recomputed from the full record set on every change;
nothing is cached between runs.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List, Optional, Sequence

import polars as pl
import structlog

from .aggregator import (
    Bucket,
    RecordFrame,
    by_category,
    by_customer,
    by_period,
    by_product,
    by_sales_person,
    chronological,
)
from .colors import ColorAssigner
from .numeric import ZERO
from .ranking import DistributionSlice, RankedEntry, distribution, ranked, top_n
from .records import Granularity, SalesPerson, SalesRecord
from .series import CumulativeBucket, StackedSeries, stacked_category_series, with_running_total

logger = structlog.get_logger(__name__)

HUNDRED = Decimal("100")


@dataclass
class PersonSummary:
    """Salesperson card: totals plus a per-day sparkline"""
    name: str
    total_amount: Decimal
    deal_count: int
    average_deal_size: Decimal
    daily_series: List[Bucket]
    color: Optional[str] = None


@dataclass
class PersonDetail:
    """Single-salesperson detail view"""
    summary: PersonSummary
    person: Optional[SalesPerson]  # None when no reference row exists
    achievement_rate: Decimal
    top_customers: List[RankedEntry]
    products: List[DistributionSlice]
    product_colors: Dict[str, str]
    records: List[SalesRecord]


@dataclass
class DashboardKpis:
    total_sales: Decimal
    order_count: int
    average_order_value: Decimal
    unique_customers: int


@dataclass
class DashboardView:
    """Every derived view of the main dashboard"""
    kpis: DashboardKpis
    series: Dict[Granularity, List[CumulativeBucket]]
    category_series: Dict[Granularity, StackedSeries]
    categories: List[Bucket]
    category_colors: Dict[str, str]
    salespeople: List[PersonSummary]
    recent_records: List[SalesRecord] = field(default_factory=list)


def average(total: Decimal, count: int) -> Decimal:
    """Mean with an explicit zero guard."""
    if count > 0:
        return total / count
    return ZERO


def achievement_rate(total: Decimal, person: Optional[SalesPerson]) -> Decimal:
    """Percentage of the monthly target reached; 0 without a target."""
    if person is None or not person.monthly_target:
        return ZERO
    return total / person.monthly_target * HUNDRED


def period_series(frame: RecordFrame, granularity: Granularity) -> List[CumulativeBucket]:
    """Chronological buckets with running totals."""
    return with_running_total(chronological(by_period(frame, granularity)))


def summarize_person(name: str, frame: RecordFrame, color: Optional[str] = None) -> PersonSummary:
    """
    Summary for one salesperson.

    Args:
        name: Salesperson display name
        frame: That person's records only
        color: Card color
    """
    total = frame.total
    count = len(frame)
    return PersonSummary(
        name=name,
        total_amount=total,
        deal_count=count,
        average_deal_size=average(total, count),
        daily_series=chronological(by_period(frame, Granularity.DAY)).buckets(),
        color=color,
    )


def person_frame(frame: RecordFrame, name: str) -> RecordFrame:
    return frame.where(pl.col("sales_person") == name)


def compose_person_summaries(frame: RecordFrame, colors: ColorAssigner) -> List[PersonSummary]:
    """One card per salesperson, in first-seen order."""
    return [
        summarize_person(name, person_frame(frame, name), colors.for_person(name))
        for name in by_sales_person(frame).keys()
    ]


def compose_person_detail(
    name: str,
    records: Sequence[SalesRecord],
    person: Optional[SalesPerson],
    colors: ColorAssigner,
    top: int = 5,
) -> PersonDetail:
    """
    Detail view for one salesperson.

    ``records`` is expected to be pre-filtered to this person by the store;
    anything else is ignored. A missing reference row yields a detail without
    reference fields, never an error.
    """
    own = person_frame(RecordFrame(records), name)
    summary = summarize_person(name, own, colors.for_person(name))
    products = by_product(own)

    return PersonDetail(
        summary=summary,
        person=person,
        achievement_rate=achievement_rate(summary.total_amount, person),
        top_customers=top_n(by_customer(own), top),
        products=distribution(ranked(products), summary.total_amount),
        product_colors=colors.for_keys(products.keys()),
        records=own.records,
    )


def compose_dashboard(
    records: Sequence[SalesRecord],
    colors: ColorAssigner,
    recent_limit: int = 10,
) -> DashboardView:
    """
    Build the full dashboard view from the complete record set.

    Args:
        records: All records, ordered ascending by date
        colors: Color policy for categories and salespeople
        recent_limit: Number of newest transactions to include

    Returns:
        DashboardView (all-zero and empty for an empty record set)
    """
    frame = RecordFrame(records)
    total = frame.total
    count = len(frame)
    kpis = DashboardKpis(
        total_sales=total,
        order_count=count,
        average_order_value=average(total, count),
        unique_customers=frame.df["customer_name"].n_unique(),
    )

    categories = by_category(frame)
    recent = list(reversed(frame.records[-recent_limit:])) if recent_limit > 0 else []

    view = DashboardView(
        kpis=kpis,
        series={g: period_series(frame, g) for g in Granularity},
        category_series={g: stacked_category_series(frame, g) for g in Granularity},
        categories=categories.buckets(),
        category_colors=colors.for_keys(categories.keys()),
        salespeople=compose_person_summaries(frame, colors),
        recent_records=recent,
    )

    logger.debug(
        "Dashboard composed",
        records=count,
        categories=len(view.categories),
        salespeople=len(view.salespeople),
    )
    return view
