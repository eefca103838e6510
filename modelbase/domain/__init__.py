"""
Domain Model Module Initialization
"""

from modelbase.domain.query import ListQuery

__all__ = [
    "ListQuery",
]
