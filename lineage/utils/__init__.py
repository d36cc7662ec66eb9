"""
Utility functions
"""
from .datetime_utils import to_datetime, utcnow
from .text import make_excerpt

__all__ = ['to_datetime', 'utcnow', 'make_excerpt']
