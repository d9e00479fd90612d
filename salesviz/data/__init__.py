"""
Data Generation Module
"""
from .generators import SalesDataGenerator

__all__ = ["SalesDataGenerator"]
