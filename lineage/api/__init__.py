"""
HTTP routers for the lineage views and relation writes
"""
from . import posts, relations

__all__ = ['posts', 'relations']
