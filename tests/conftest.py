"""
Test Configuration Module
"""

import pytest_asyncio
from typing import AsyncGenerator

from sqlalchemy.ext.asyncio import AsyncSession

from modelbase.db.models import Base
from modelbase.db.session import create_engine, create_session_factory
from sample_models import Setting, User  # noqa: F401  register tables on Base.metadata


# Use in-memory database for testing
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


@pytest_asyncio.fixture
async def async_engine():
    """Create async database engine for testing"""
    engine = create_engine(TEST_DATABASE_URL, echo=False, database_type="sqlite")

    # Create all tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    # Clean up
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture
async def db_session(async_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for testing"""
    async_session = create_session_factory(async_engine)

    async with async_session() as session:
        yield session

