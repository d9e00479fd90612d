"""
Sales Record Cleaning

Ingestion-boundary cleaning of rows fetched from the data store:
- Whitespace trimming of display strings
- Empty categories mapped to absent
- Records with malformed dates dropped (not YYYY-MM-DD)
- Deduplication by id, first occurrence wins

Input order is preserved throughout. Numeric fields are carried as text and
coerced to exact decimals when the records are built.
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Tuple

import polars as pl
import structlog

from salesviz.aggregation.numeric import to_decimal, to_int
from salesviz.aggregation.records import SalesRecord

logger = structlog.get_logger(__name__)

RECORD_COLUMNS = [
    "id",
    "date",
    "customer_name",
    "product_name",
    "quantity",
    "unit_price",
    "total_amount",
    "sales_person",
    "category",
    "notes",
    "created_at",
    "updated_at",
]

DISPLAY_COLUMNS = ["customer_name", "product_name", "sales_person", "category"]

ISO_DATE_PATTERN = r"^\d{4}-\d{2}-\d{2}$"


@dataclass
class CleaningStats:
    """Statistics from cleaning operations"""
    total_rows: int
    rows_after_cleaning: int
    invalid_dates: int
    duplicates_removed: int

    @property
    def rows_dropped(self) -> int:
        return self.total_rows - self.rows_after_cleaning


def _as_text(value: Any) -> Any:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


class SalesRecordCleaner:
    """
    Cleans raw sales rows into SalesRecord objects.

    Example:
        cleaner = SalesRecordCleaner()
        records, stats = cleaner.clean(rows)
    """

    def to_frame(self, rows: Iterable[Dict[str, Any]]) -> pl.DataFrame:
        """Build an all-text frame from row mappings"""
        rows = list(rows)
        data = {col: [_as_text(row.get(col)) for row in rows] for col in RECORD_COLUMNS}
        return pl.DataFrame(data, schema={col: pl.Utf8 for col in RECORD_COLUMNS})

    def _trim_strings(self, df: pl.DataFrame) -> pl.DataFrame:
        """Trim whitespace from display columns"""
        return df.with_columns(
            [pl.col(col).str.strip_chars().alias(col) for col in DISPLAY_COLUMNS]
        )

    def _normalize_categories(self, df: pl.DataFrame) -> pl.DataFrame:
        """Empty category strings become null"""
        return df.with_columns(
            pl.when(pl.col("category") == "")
            .then(pl.lit(None, dtype=pl.Utf8))
            .otherwise(pl.col("category"))
            .alias("category")
        )

    def _drop_invalid_dates(self, df: pl.DataFrame) -> pl.DataFrame:
        """Keep only rows whose date is a real YYYY-MM-DD calendar date"""
        date_col = pl.col("date").str.strip_chars()
        valid = (
            date_col.str.contains(ISO_DATE_PATTERN)
            & date_col.str.strptime(pl.Date, "%Y-%m-%d", strict=False).is_not_null()
        ).fill_null(False)
        return df.with_columns(date_col.alias("date")).filter(valid)

    def _remove_duplicates(self, df: pl.DataFrame) -> pl.DataFrame:
        return df.unique(subset=["id"], keep="first", maintain_order=True)

    def to_records(self, df: pl.DataFrame) -> List[SalesRecord]:
        """Convert a cleaned frame to records, coercing numeric fields"""
        return [
            SalesRecord(
                id=row["id"],
                date=row["date"],
                customer_name=row["customer_name"] or "",
                product_name=row["product_name"] or "",
                sales_person=row["sales_person"] or "",
                quantity=to_int(row["quantity"]),
                unit_price=to_decimal(row["unit_price"]),
                total_amount=to_decimal(row["total_amount"]),
                category=row["category"],
                notes=row["notes"],
                created_at=row["created_at"],
                updated_at=row["updated_at"],
            )
            for row in df.iter_rows(named=True)
        ]

    def clean(self, rows: Iterable[Dict[str, Any]]) -> Tuple[List[SalesRecord], CleaningStats]:
        """
        Clean raw rows.

        Args:
            rows: Row mappings keyed by column name, in store order

        Returns:
            Tuple of (records, stats)
        """
        df = self.to_frame(rows)
        total_rows = len(df)

        df = self._trim_strings(df)
        df = self._normalize_categories(df)

        dated = self._drop_invalid_dates(df)
        invalid_dates = total_rows - len(dated)

        deduped = self._remove_duplicates(dated)
        duplicates_removed = len(dated) - len(deduped)

        stats = CleaningStats(
            total_rows=total_rows,
            rows_after_cleaning=len(deduped),
            invalid_dates=invalid_dates,
            duplicates_removed=duplicates_removed,
        )
        if stats.rows_dropped:
            logger.warning(
                "Dropped sales records at ingestion",
                invalid_dates=invalid_dates,
                duplicates_removed=duplicates_removed,
            )

        return self.to_records(deduped), stats
