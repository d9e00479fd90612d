"""
Sales Visualization Platform

Transaction aggregation engine and dashboard API for sales analytics.
"""

__version__ = "1.0.0"
