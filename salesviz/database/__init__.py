"""
Database Module
"""
from .connection import init_database, close_database, get_db, get_session_factory
from .models import Base, SalesPersonRow, SalesRecordRow

__all__ = [
    "init_database",
    "close_database",
    "get_db",
    "get_session_factory",
    "Base",
    "SalesPersonRow",
    "SalesRecordRow",
]
