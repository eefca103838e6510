"""
Database Session Management Module

Provides the asynchronous engine and session factory that repositories run
on, supporting SQLite, PostgreSQL and MySQL.
"""

from functools import lru_cache
from typing import AsyncGenerator, Optional

from sqlalchemy import event
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from modelbase.config import get_settings


def _configure_sqlite(engine: AsyncEngine) -> None:
    """
    SQLite connection setup

    - Enable foreign keys (required for CASCADE deletes)
    - Let SQLAlchemy emit BEGIN itself so SAVEPOINT (begin_nested) works;
      the driver's own transaction handling breaks it
    """

    @event.listens_for(engine.sync_engine, "connect")
    def _on_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine.sync_engine, "begin")
    def _on_begin(conn):
        conn.exec_driver_sql("BEGIN")


def create_engine(
    database_url: Optional[str] = None,
    echo: Optional[bool] = None,
    database_type: Optional[str] = None,
) -> AsyncEngine:
    """
    Create asynchronous database engine

    Args:
        database_url: Async connection string, defaults to Settings.DATABASE_URL
        echo: Print SQL statements, defaults to Settings.DEBUG
        database_type: "sqlite", "postgresql" or "mysql", defaults to Settings.DATABASE_TYPE

    Returns:
        AsyncEngine: Configured engine
    """
    settings = get_settings()
    url = database_url or settings.DATABASE_URL
    is_sqlite = (database_type or settings.DATABASE_TYPE) == "sqlite"

    engine = create_async_engine(
        url,
        echo=settings.DEBUG if echo is None else echo,
        # SQLite specific configuration
        connect_args={"check_same_thread": False} if is_sqlite else {},
    )
    if is_sqlite:
        _configure_sqlite(engine)
    return engine


def create_session_factory(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    """Create asynchronous session factory bound to an engine"""
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,  # Rows stay readable after commit without a reload
        autoflush=False,
    )


@lru_cache()
def get_engine() -> AsyncEngine:
    """Process-wide engine built from settings"""
    return create_engine()


@lru_cache()
def get_session_factory() -> async_sessionmaker[AsyncSession]:
    """Process-wide session factory bound to get_engine()"""
    return create_session_factory(get_engine())


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Get database session

    Uses async with to ensure session is closed correctly.

    Yields:
        AsyncSession: Async database session

    Example:
        async for session in get_db():
            users = SQLAlchemyModelBase[int, User](session, User)
            ...
    """
    async with get_session_factory()() as session:
        try:
            yield session
        except Exception:
            await session.rollback()
            raise


async def init_db(engine: Optional[AsyncEngine] = None) -> None:
    """
    Create all tables registered on modelbase.db.models.Base

    Note:
        Intended for tests and local setups; schema migrations are out of scope.
    """
    from modelbase.db.models import Base

    engine = engine or get_engine()
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
