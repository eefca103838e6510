"""
Data Access Layer Module Initialization
"""

from modelbase.repositories.base import DataObject
from modelbase.repositories.model_base import ModelBase
from modelbase.repositories.options import (
    ListOpt,
    LockMode,
    PageOpt,
    QueryBuilder,
    SortOpt,
    SortOrder,
    WhereOpt,
    offset_opt,
    page_opt,
    sort_opt,
    where_opt,
)

__all__ = [
    "DataObject",
    "ModelBase",
    "ListOpt",
    "LockMode",
    "PageOpt",
    "QueryBuilder",
    "SortOpt",
    "SortOrder",
    "WhereOpt",
    "offset_opt",
    "page_opt",
    "sort_opt",
    "where_opt",
]
