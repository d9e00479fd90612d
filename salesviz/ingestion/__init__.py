"""
Data Ingestion Module
"""
from .cleaners import CleaningStats, SalesRecordCleaner
from .change_feed import ChangeNotification, ChangeSubscription, publish_change
from .store import SalesStore

__all__ = [
    "CleaningStats",
    "SalesRecordCleaner",
    "ChangeNotification",
    "ChangeSubscription",
    "publish_change",
    "SalesStore",
]
