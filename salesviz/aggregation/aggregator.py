"""
Generic Group Aggregation

Records are loaded once into a polars frame and every grouping dimension
(date buckets, category, salesperson, customer, product) goes through the
same ``group_by`` on a key expression. Keys keep first-seen order; callers
that need chronological or ranked output sort afterwards.

Amounts are carried as Int64 minor units: each amount times ``10**scale``,
where ``scale`` is the largest number of decimal places in the record set.
Sums and running totals therefore stay exact and convert back to ``Decimal``
losslessly.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Dict, Iterable, List

import polars as pl

from .bucketing import bucket_expr
from .numeric import ZERO
from .records import Granularity, SalesRecord

AMOUNT = pl.col("amount")

FRAME_SCHEMA = {
    "row": pl.Int64,
    "date": pl.Utf8,
    "customer_name": pl.Utf8,
    "product_name": pl.Utf8,
    "sales_person": pl.Utf8,
    "category": pl.Utf8,
    "amount": pl.Int64,
}


def amount_scale(amounts: Iterable[Decimal]) -> int:
    """Decimal places needed to hold every amount as an integer."""
    return max((max(0, -a.as_tuple().exponent) for a in amounts), default=0)


def from_minor_units(value: int, scale: int) -> Decimal:
    return Decimal(value).scaleb(-scale)


@dataclass
class Bucket:
    """Summed amount and record count for one key"""
    key: str
    amount: Decimal = ZERO
    count: int = 0


class RecordFrame:
    """
    Columnar view of sales records for aggregation.

    The category column holds the resolved label, so absent categories are
    already grouped under the sentinel.

    Example:
        frame = RecordFrame(records)
        by_category(frame).buckets()
    """

    def __init__(self, records: Iterable[SalesRecord]):
        self.records: List[SalesRecord] = list(records)
        self.scale = amount_scale(r.total_amount for r in self.records)
        self.df = pl.DataFrame(
            {
                "row": list(range(len(self.records))),
                "date": [r.date for r in self.records],
                "customer_name": [r.customer_name for r in self.records],
                "product_name": [r.product_name for r in self.records],
                "sales_person": [r.sales_person for r in self.records],
                "category": [r.category_label for r in self.records],
                "amount": [int(r.total_amount.scaleb(self.scale)) for r in self.records],
            },
            schema=FRAME_SCHEMA,
        )

    def __len__(self) -> int:
        return len(self.records)

    @property
    def total(self) -> Decimal:
        return from_minor_units(self.df["amount"].sum(), self.scale)

    def where(self, predicate: pl.Expr) -> "RecordFrame":
        """Frame over the records matching ``predicate``, input order kept."""
        rows = self.df.filter(predicate)["row"].to_list()
        return RecordFrame(self.records[i] for i in rows)


class Grouped:
    """Keyed sums and counts: a ``key, amount, count`` frame in minor units"""

    def __init__(self, df: pl.DataFrame, scale: int):
        self.df = df
        self.scale = scale

    def __len__(self) -> int:
        return self.df.height

    def keys(self) -> List[str]:
        return self.df["key"].to_list()

    def buckets(self) -> List[Bucket]:
        return [
            Bucket(
                key=row["key"],
                amount=from_minor_units(row["amount"], self.scale),
                count=row["count"],
            )
            for row in self.df.iter_rows(named=True)
        ]

    def as_dict(self) -> Dict[str, Bucket]:
        return {bucket.key: bucket for bucket in self.buckets()}


def group_by(frame: RecordFrame, key: pl.Expr, amount: pl.Expr = AMOUNT) -> Grouped:
    """
    Sum and count records per key.

    Args:
        frame: Records in input order
        key: Expression producing the grouping key
        amount: Expression producing the amount to sum, in the frame's
            minor units

    Returns:
        Grouped result, keys in first-seen order
    """
    df = frame.df.group_by(key.alias("key"), maintain_order=True).agg(
        amount.sum().alias("amount"),
        pl.len().alias("count"),
    )
    return Grouped(df, frame.scale)


def by_period(frame: RecordFrame, granularity: Granularity) -> Grouped:
    """Group records into time buckets of the given granularity."""
    return group_by(frame, bucket_expr(granularity))


def by_category(frame: RecordFrame) -> Grouped:
    return group_by(frame, pl.col("category"))


def by_sales_person(frame: RecordFrame) -> Grouped:
    return group_by(frame, pl.col("sales_person"))


def by_customer(frame: RecordFrame) -> Grouped:
    return group_by(frame, pl.col("customer_name"))


def by_product(frame: RecordFrame) -> Grouped:
    return group_by(frame, pl.col("product_name"))


def chronological(grouped: Grouped) -> Grouped:
    """Sorted ascending by key (valid for YYYY-MM-DD and YYYY-MM keys)."""
    return Grouped(grouped.df.sort("key", maintain_order=True), grouped.scale)
