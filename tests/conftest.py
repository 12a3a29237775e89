"""
Pytest configuration and fixtures for catalog tests.
"""

import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from catalog.db.models import Base
from catalog.store import ResourceStore


@pytest.fixture
async def engine():
    """In-memory SQLite engine with the catalog schema."""
    engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
async def store(engine) -> ResourceStore:
    """Resource store bound to the in-memory engine."""
    return ResourceStore(engine)
