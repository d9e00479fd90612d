"""
Serving Module
"""
from .refresher import DashboardRefresher, watch_changes

__all__ = [
    "DashboardRefresher",
    "watch_changes",
]
