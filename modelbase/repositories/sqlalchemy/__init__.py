"""
SQLAlchemy Repository Implementation Module Initialization
"""

from modelbase.repositories.sqlalchemy.model_base import (
    SQLAlchemyModelBase,
    inspect_row_type,
)

__all__ = [
    "SQLAlchemyModelBase",
    "inspect_row_type",
]
