"""
Time series builders: running totals and stacked per-category series.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import Dict, List

import polars as pl

from .aggregator import AMOUNT, Grouped, RecordFrame, from_minor_units
from .bucketing import bucket_expr
from .records import Granularity


@dataclass
class CumulativeBucket:
    """Bucket annotated with the running total up to and including it"""
    key: str
    amount: Decimal
    count: int
    running_total: Decimal


@dataclass
class CategorySeriesPoint:
    """Per-bucket category amounts; absent categories are implicitly zero"""
    key: str
    amounts: Dict[str, Decimal] = field(default_factory=dict)


@dataclass
class StackedSeries:
    points: List[CategorySeriesPoint]
    # Union of categories over the whole record set, first-seen order
    categories: List[str]


def with_running_total(grouped: Grouped) -> List[CumulativeBucket]:
    """
    Annotate already-ordered buckets with a running total.

    The total starts at zero and is accumulated left to right as-is; negative
    amounts are not clamped.
    """
    df = grouped.df.with_columns(AMOUNT.cum_sum().alias("running_total"))
    return [
        CumulativeBucket(
            key=row["key"],
            amount=from_minor_units(row["amount"], grouped.scale),
            count=row["count"],
            running_total=from_minor_units(row["running_total"], grouped.scale),
        )
        for row in df.iter_rows(named=True)
    ]


def stacked_category_series(frame: RecordFrame, granularity: Granularity) -> StackedSeries:
    """
    Build one point per time bucket with the amount of every category sold in it.

    Points are returned in chronological order. Categories with no sales in a
    bucket are omitted from that point rather than emitted as zero.
    """
    sums = (
        frame.df.group_by(bucket_expr(granularity).alias("key"), "category", maintain_order=True)
        .agg(AMOUNT.sum())
        .sort("key", maintain_order=True)
    )

    points: Dict[str, CategorySeriesPoint] = {}
    for row in sums.iter_rows(named=True):
        point = points.setdefault(row["key"], CategorySeriesPoint(key=row["key"]))
        point.amounts[row["category"]] = from_minor_units(row["amount"], frame.scale)

    return StackedSeries(
        points=list(points.values()),
        categories=frame.df["category"].unique(maintain_order=True).to_list(),
    )
