"""
modelbase - generic async repository over SQLAlchemy

Uniform insert/upsert/get/list/count/update/delete for any mapped row type,
with composable filter, sort and page options.
"""

from modelbase.common.errors import (
    ConfigurationError,
    DuplicateKeyError,
    ExecutorError,
    InvalidOptionError,
    MissingPrimaryKeyError,
    ModelBaseError,
    NotFoundError,
    QueryTimeoutError,
    ValidationError,
)
from modelbase.db.models import Base
from modelbase.domain.query import ListQuery
from modelbase.repositories import (
    DataObject,
    ListOpt,
    LockMode,
    ModelBase,
    SortOrder,
    offset_opt,
    page_opt,
    sort_opt,
    where_opt,
)
from modelbase.repositories.sqlalchemy import SQLAlchemyModelBase

__version__ = "0.1.0"

__all__ = [
    "Base",
    "ConfigurationError",
    "DataObject",
    "DuplicateKeyError",
    "ExecutorError",
    "InvalidOptionError",
    "ListOpt",
    "ListQuery",
    "LockMode",
    "MissingPrimaryKeyError",
    "ModelBase",
    "ModelBaseError",
    "NotFoundError",
    "QueryTimeoutError",
    "SQLAlchemyModelBase",
    "SortOrder",
    "ValidationError",
    "offset_opt",
    "page_opt",
    "sort_opt",
    "where_opt",
]
