"""Pytest configuration and fixtures."""

import os

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")

from collections.abc import AsyncGenerator, Awaitable, Callable
from datetime import UTC, datetime, timedelta
from typing import Any

import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from lims.db.database import get_db
from lims.main import app
from lims.models import Base, Batch, Reagent

# Test database URL (uses SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

BASE_TIME = datetime(2024, 1, 1, 12, 0, 0, tzinfo=UTC)


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on a fresh in-memory database."""
    # One shared connection so every session sees the same in-memory database
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_maker = async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )
    async with session_maker() as session:
        yield session

    await engine.dispose()


@pytest_asyncio.fixture
async def client(db_session: AsyncSession) -> AsyncGenerator[AsyncClient, None]:
    """Create a test client bound to the test session."""

    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as ac:
        yield ac

    app.dependency_overrides.clear()


ReagentFactory = Callable[..., Awaitable[Reagent]]
BatchFactory = Callable[..., Awaitable[Batch]]


@pytest_asyncio.fixture
async def make_reagent(db_session: AsyncSession) -> ReagentFactory:
    """Factory inserting one reagent; ``minutes`` offsets ``created_at``."""
    counter = 0

    async def _make(
        name: str | None = None,
        total_quantity: float = 0.0,
        minutes: int | None = None,
        **fields: Any,
    ) -> Reagent:
        nonlocal counter
        counter += 1
        created = BASE_TIME + timedelta(minutes=counter if minutes is None else minutes)
        reagent = Reagent(
            name=name or f"Reagent {counter:03d}",
            total_quantity=total_quantity,
            created_at=created,
            updated_at=created,
            **fields,
        )
        db_session.add(reagent)
        await db_session.commit()
        await db_session.refresh(reagent)
        return reagent

    return _make


@pytest_asyncio.fixture
async def make_batch(db_session: AsyncSession, make_reagent: ReagentFactory) -> BatchFactory:
    """Factory inserting one batch, creating a parent reagent if none given."""
    counter = 0

    async def _make(
        reagent: Reagent | None = None,
        quantity: float = 1.0,
        **fields: Any,
    ) -> Batch:
        nonlocal counter
        counter += 1
        if reagent is None:
            reagent = await make_reagent()
        created = BASE_TIME + timedelta(minutes=counter)
        fields.setdefault("batch_number", f"B-{counter:04d}")
        batch = Batch(
            reagent_id=reagent.id,
            quantity=quantity,
            original_quantity=quantity,
            created_at=created,
            updated_at=created,
            **fields,
        )
        db_session.add(batch)
        await db_session.commit()
        await db_session.refresh(batch)
        return batch

    return _make
