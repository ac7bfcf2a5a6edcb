"""Integration-test fixtures.

These tests need a migrated PostgreSQL database
(``alembic -x db_url=$PM_INTEGRATION_DATABASE_URL upgrade head``)
reachable at PM_INTEGRATION_DATABASE_URL; without it they are skipped.
"""

import os
import uuid

import pytest
import pytest_asyncio
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

DATABASE_URL = os.environ.get("PM_INTEGRATION_DATABASE_URL")


def pytest_collection_modifyitems(config, items):  # type: ignore[no-untyped-def]
    if DATABASE_URL:
        return
    skip = pytest.mark.skip(reason="PM_INTEGRATION_DATABASE_URL not set")
    for item in items:
        if "integration" in str(item.fspath):
            item.add_marker(skip)


@pytest_asyncio.fixture
async def session_factory():
    engine = create_async_engine(DATABASE_URL)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def seeded_market(session_factory):
    """One event with one market (condition) and two outcomes; removed afterwards."""
    suffix = uuid.uuid4().hex[:8]
    ids = {
        "event_id": f"ev-{suffix}",
        "slug": f"it-{suffix}",
        "condition_id": f"0x{suffix}",
        "yes": f"yes-{suffix}",
        "no": f"no-{suffix}",
    }
    async with session_factory() as db:
        async with db.begin():
            await db.execute(
                text("INSERT INTO events (id, slug, title) VALUES (:event_id, :slug, 'IT')"), ids
            )
            await db.execute(text("INSERT INTO conditions (id) VALUES (:condition_id)"), ids)
            await db.execute(
                text("INSERT INTO markets (condition_id, event_id, title) "
                     "VALUES (:condition_id, :event_id, 'IT market')"),
                ids,
            )
            await db.execute(
                text("INSERT INTO outcomes (token_id, condition_id, outcome_index, outcome_text) "
                     "VALUES (:yes, :condition_id, 0, 'Yes'), (:no, :condition_id, 1, 'No')"),
                ids,
            )
    yield ids
    async with session_factory() as db:
        async with db.begin():
            await db.execute(text("DELETE FROM events WHERE id = :event_id"), ids)
            await db.execute(text("DELETE FROM conditions WHERE id = :condition_id"), ids)
