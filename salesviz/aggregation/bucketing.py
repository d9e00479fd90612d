"""
Time bucketing of record dates.

Dates are assumed well-formed ``YYYY-MM-DD``; malformed dates are dropped at
the ingestion boundary (see ``salesviz.ingestion.cleaners``).
"""

from typing import Optional

import polars as pl

from .records import Granularity


def bucket_expr(granularity: Granularity, date: Optional[pl.Expr] = None) -> pl.Expr:
    """
    Expression mapping a ``YYYY-MM-DD`` string column to its bucket key.

    - day: the date itself
    - week: the Sunday on or before the date (not ISO Monday weeks)
    - month: YYYY-MM
    """
    if date is None:
        date = pl.col("date")

    if granularity == Granularity.WEEK:
        day = date.str.to_date("%Y-%m-%d")
        # weekday() is Monday=1 .. Sunday=7, so days since Sunday is weekday % 7
        since_sunday = day.dt.weekday().cast(pl.Int64) % 7
        return (day - pl.duration(days=since_sunday)).cast(pl.Date).dt.strftime("%Y-%m-%d")
    if granularity == Granularity.MONTH:
        return date.str.slice(0, 7)
    return date


def bucket_key(value: str, granularity: Granularity) -> str:
    """Bucket key of a single date."""
    return pl.select(bucket_expr(granularity, pl.lit(value, dtype=pl.Utf8))).item()
