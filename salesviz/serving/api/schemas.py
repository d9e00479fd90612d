"""
API Response Schemas

Renderer-facing shapes of the aggregation view models. Amounts are exact
Decimals inside the engine and plain JSON numbers here.
"""

from datetime import datetime
from decimal import Decimal
from typing import Dict, List, Optional

from pydantic import BaseModel

from salesviz.aggregation import (
    Bucket,
    CumulativeBucket,
    DashboardView,
    Granularity,
    PersonDetail,
    PersonSummary,
    SalesRecord,
    StackedSeries,
)


def money(value: Decimal) -> float:
    return float(value)


class BucketOut(BaseModel):
    key: str
    amount: float
    count: int


class CumulativeBucketOut(BaseModel):
    key: str
    amount: float
    count: int
    cumulative: float


class CategoryPointOut(BaseModel):
    """Amounts per category in one period; categories with no sales are omitted"""
    key: str
    amounts: Dict[str, float]


class StackedSeriesOut(BaseModel):
    categories: List[str]
    points: List[CategoryPointOut]


class CategoryOut(BaseModel):
    category: str
    amount: float
    count: int
    color: str


class SparkPointOut(BaseModel):
    date: str
    amount: float


class PersonSummaryOut(BaseModel):
    name: str
    total_amount: float
    deal_count: int
    average_deal_size: float
    color: Optional[str]
    sparkline: List[SparkPointOut]


class RecordOut(BaseModel):
    id: str
    date: str
    customer_name: str
    product_name: str
    quantity: int
    unit_price: float
    total_amount: float
    sales_person: str
    category: Optional[str]


class KpisOut(BaseModel):
    total_sales: float
    order_count: int
    average_order_value: float
    unique_customers: int


class SeriesResponse(BaseModel):
    granularity: Granularity
    series: List[CumulativeBucketOut]
    category_series: StackedSeriesOut


class DashboardResponse(BaseModel):
    kpis: KpisOut
    series: Dict[str, List[CumulativeBucketOut]]
    category_series: Dict[str, StackedSeriesOut]
    categories: List[CategoryOut]
    salespeople: List[PersonSummaryOut]
    recent_records: List[RecordOut]
    refreshed_at: Optional[datetime]
    stale: bool


class PersonInfoOut(BaseModel):
    name: str
    department: Optional[str]
    email: Optional[str]
    monthly_target: float
    quarterly_target: float
    hire_date: Optional[str]


class RankedOut(BaseModel):
    key: str
    amount: float


class ProductSliceOut(BaseModel):
    key: str
    amount: float
    share: float
    color: str


class PersonDetailResponse(BaseModel):
    name: str
    person: Optional[PersonInfoOut]
    total_amount: float
    deal_count: int
    average_deal_size: float
    achievement_rate: float
    color: Optional[str]
    daily_series: List[BucketOut]
    top_customers: List[RankedOut]
    products: List[ProductSliceOut]
    records: List[RecordOut]


# =============================================================================
# CONVERTERS
# =============================================================================

def bucket_out(bucket: Bucket) -> BucketOut:
    return BucketOut(key=bucket.key, amount=money(bucket.amount), count=bucket.count)


def cumulative_out(series: List[CumulativeBucket]) -> List[CumulativeBucketOut]:
    return [
        CumulativeBucketOut(
            key=b.key,
            amount=money(b.amount),
            count=b.count,
            cumulative=money(b.running_total),
        )
        for b in series
    ]


def stacked_out(stacked: StackedSeries) -> StackedSeriesOut:
    return StackedSeriesOut(
        categories=stacked.categories,
        points=[
            CategoryPointOut(
                key=p.key,
                amounts={category: money(amount) for category, amount in p.amounts.items()},
            )
            for p in stacked.points
        ],
    )


def record_out(record: SalesRecord) -> RecordOut:
    return RecordOut(
        id=record.id,
        date=record.date,
        customer_name=record.customer_name,
        product_name=record.product_name,
        quantity=record.quantity,
        unit_price=money(record.unit_price),
        total_amount=money(record.total_amount),
        sales_person=record.sales_person,
        category=record.category,
    )


def person_summary_out(summary: PersonSummary) -> PersonSummaryOut:
    return PersonSummaryOut(
        name=summary.name,
        total_amount=money(summary.total_amount),
        deal_count=summary.deal_count,
        average_deal_size=money(summary.average_deal_size),
        color=summary.color,
        sparkline=[SparkPointOut(date=b.key, amount=money(b.amount)) for b in summary.daily_series],
    )


def series_out(view: DashboardView, granularity: Granularity) -> SeriesResponse:
    return SeriesResponse(
        granularity=granularity,
        series=cumulative_out(view.series[granularity]),
        category_series=stacked_out(view.category_series[granularity]),
    )


def dashboard_out(view: DashboardView, refreshed_at: Optional[datetime], stale: bool) -> DashboardResponse:
    kpis = view.kpis
    return DashboardResponse(
        kpis=KpisOut(
            total_sales=money(kpis.total_sales),
            order_count=kpis.order_count,
            average_order_value=money(kpis.average_order_value),
            unique_customers=kpis.unique_customers,
        ),
        series={g.value: cumulative_out(s) for g, s in view.series.items()},
        category_series={g.value: stacked_out(s) for g, s in view.category_series.items()},
        categories=[
            CategoryOut(
                category=b.key,
                amount=money(b.amount),
                count=b.count,
                color=view.category_colors[b.key],
            )
            for b in view.categories
        ],
        salespeople=[person_summary_out(s) for s in view.salespeople],
        recent_records=[record_out(r) for r in view.recent_records],
        refreshed_at=refreshed_at,
        stale=stale,
    )


def person_detail_out(detail: PersonDetail) -> PersonDetailResponse:
    person = detail.person
    summary = detail.summary
    return PersonDetailResponse(
        name=summary.name,
        person=PersonInfoOut(
            name=person.name,
            department=person.department,
            email=person.email,
            monthly_target=money(person.monthly_target),
            quarterly_target=money(person.quarterly_target),
            hire_date=person.hire_date,
        ) if person else None,
        total_amount=money(summary.total_amount),
        deal_count=summary.deal_count,
        average_deal_size=money(summary.average_deal_size),
        achievement_rate=money(detail.achievement_rate),
        color=summary.color,
        daily_series=[bucket_out(b) for b in summary.daily_series],
        top_customers=[RankedOut(key=e.key, amount=money(e.amount)) for e in detail.top_customers],
        products=[
            ProductSliceOut(
                key=s.key,
                amount=money(s.amount),
                share=float(s.share),
                color=detail.product_colors[s.key],
            )
            for s in detail.products
        ],
        records=[record_out(r) for r in detail.records],
    )
