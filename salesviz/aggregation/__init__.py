"""
Transaction Aggregation Module
"""
from .aggregator import Bucket, Grouped, RecordFrame, group_by
from .bucketing import bucket_expr, bucket_key
from .colors import ColorAssigner
from .numeric import to_decimal
from .ranking import RankedEntry, top_n
from .records import UNCATEGORIZED, Granularity, SalesPerson, SalesRecord
from .series import CumulativeBucket, StackedSeries, stacked_category_series, with_running_total
from .summary import (
    DashboardView,
    PersonDetail,
    PersonSummary,
    compose_dashboard,
    compose_person_detail,
)

__all__ = [
    "Bucket",
    "Grouped",
    "RecordFrame",
    "group_by",
    "bucket_expr",
    "bucket_key",
    "ColorAssigner",
    "to_decimal",
    "RankedEntry",
    "top_n",
    "UNCATEGORIZED",
    "Granularity",
    "SalesPerson",
    "SalesRecord",
    "CumulativeBucket",
    "StackedSeries",
    "stacked_category_series",
    "with_running_total",
    "DashboardView",
    "PersonDetail",
    "PersonSummary",
    "compose_dashboard",
    "compose_person_detail",
]
