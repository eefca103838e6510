"""
Database Module Initialization
"""

from modelbase.db.session import (
    create_engine,
    create_session_factory,
    get_db,
    get_engine,
    get_session_factory,
    init_db,
)
from modelbase.db.models import Base

__all__ = [
    "create_engine",
    "create_session_factory",
    "get_db",
    "get_engine",
    "get_session_factory",
    "init_db",
    "Base",
]
