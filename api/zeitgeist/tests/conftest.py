"""Shared pytest fixtures for store, service, and API tests."""

from __future__ import annotations

import os

os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("STORE_BACKEND", "memory")
os.environ.setdefault("CRON_SECRET", "test-cron-secret")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from zeitgeist.core.config import settings
from zeitgeist.db.base import Base
from zeitgeist.main import create_app
from zeitgeist.matchers.registry import MatcherRegistry, build_matcher_registry
from zeitgeist.store.memory import MemoryStore
from zeitgeist.store.sql import SqlStore


@pytest.fixture()
def store() -> MemoryStore:
    return MemoryStore()


@pytest.fixture()
def matchers() -> MatcherRegistry:
    return build_matcher_registry(settings)


@pytest_asyncio.fixture()
async def sql_store(tmp_path) -> SqlStore:
    database_url = settings.test_database_url or f"sqlite+aiosqlite:///{tmp_path / 'zeitgeist-test.db'}"
    engine = create_async_engine(database_url, future=True)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    TestingSession = async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    sql = SqlStore(TestingSession)
    try:
        yield sql
    finally:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.drop_all)
        await engine.dispose()


@pytest_asyncio.fixture()
async def client(store: MemoryStore, matchers: MatcherRegistry) -> AsyncClient:
    app = create_app(store=store, matchers=matchers)
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as async_client:
        yield async_client
