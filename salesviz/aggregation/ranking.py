"""
Rankings and distribution shares over aggregated groups.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import List, Optional

import polars as pl

from .aggregator import Grouped, from_minor_units
from .numeric import ZERO


@dataclass
class RankedEntry:
    key: str
    amount: Decimal


@dataclass
class DistributionSlice:
    """One slice of a distribution (pie) chart"""
    key: str
    amount: Decimal
    share: Decimal  # fraction of the total, 0..1


def _by_amount(grouped: Grouped) -> pl.DataFrame:
    return grouped.df.sort("amount", descending=True, maintain_order=True)


def _entries(df: pl.DataFrame, scale: int) -> List[RankedEntry]:
    return [
        RankedEntry(key=key, amount=from_minor_units(amount, scale))
        for key, amount in df.select("key", "amount").iter_rows()
    ]


def ranked(grouped: Grouped) -> List[RankedEntry]:
    """All entries sorted by amount descending; ties keep first-seen order."""
    return _entries(_by_amount(grouped), grouped.scale)


def top_n(grouped: Grouped, n: int) -> List[RankedEntry]:
    """
    The ``n`` largest entries by amount.

    Returns every entry when fewer than ``n`` keys exist; ``n <= 0`` yields
    an empty list.
    """
    if n <= 0:
        return []
    return _entries(_by_amount(grouped).head(n), grouped.scale)


def distribution(entries: List[RankedEntry], total: Optional[Decimal] = None) -> List[DistributionSlice]:
    """Share of each entry in the total (zero shares when the total is zero)."""
    if total is None:
        total = sum((e.amount for e in entries), ZERO)
    return [
        DistributionSlice(
            key=e.key,
            amount=e.amount,
            share=(e.amount / total) if total else ZERO,
        )
        for e in entries
    ]
