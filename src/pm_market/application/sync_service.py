"""Event snapshot synchronization and its fire-and-forget trigger.

SnapshotSyncService.sync_event(slug):
    1. resolve the event's condition ids (unknown event / no markets → no-op)
    2. BatchFetcher.sync_conditions() : partial results allowed
    3. SnapshotUpsertEngine.apply()   : one transaction, fresh session

BackgroundRefresher.trigger(slug) spawns sync_event as a detached task. The
caller gets no handle and never learns the outcome: the page is served from
the cached snapshot either way, and a failed refresh is only logged.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.pm_exchange.domain.models import ConditionSnapshot
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_market.infrastructure.snapshot_writer import SnapshotUpsertEngine

logger = logging.getLogger(__name__)


class ConditionFetcher(Protocol):
    async def sync_conditions(
        self, condition_ids: Sequence[str]
    ) -> list[ConditionSnapshot]: ...


class SnapshotSyncService:
    def __init__(
        self,
        fetcher: ConditionFetcher,
        session_factory: async_sessionmaker[AsyncSession],
        repo: MarketRepositoryProtocol | None = None,
        writer: SnapshotUpsertEngine | None = None,
    ) -> None:
        self._fetcher = fetcher
        self._session_factory = session_factory
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()
        self._writer = writer or SnapshotUpsertEngine()

    async def sync_event(self, slug: str) -> int:
        """Refresh every market of the event; returns conditions written."""
        async with self._session_factory() as db:
            condition_ids = await self._repo.get_event_condition_ids(db, slug)

        if not condition_ids:
            return 0

        snapshots = await self._fetcher.sync_conditions(condition_ids)
        if not snapshots:
            logger.info("No exchange snapshots returned for event %s", slug)
            return 0

        async with self._session_factory() as db:
            applied = await self._writer.apply(db, snapshots)

        logger.info(
            "Synced event %s: %d/%d conditions", slug, applied, len(condition_ids)
        )
        return applied


class BackgroundRefresher:
    """Spawns detached sync_event tasks, at most one in flight per slug."""

    def __init__(self, sync_service: SnapshotSyncService) -> None:
        self._sync_service = sync_service
        self._in_flight: dict[str, asyncio.Task[int]] = {}

    def trigger(self, slug: str) -> bool:
        """Schedule a refresh; False when one for this slug is already running."""
        if slug in self._in_flight:
            return False
        task = asyncio.create_task(
            self._sync_service.sync_event(slug), name=f"snapshot-sync:{slug}"
        )
        # the dict also keeps a strong reference so the task is not GC'd mid-flight
        self._in_flight[slug] = task
        task.add_done_callback(lambda t: self._on_done(slug, t))
        return True

    def in_flight(self) -> list[str]:
        return sorted(self._in_flight)

    def _on_done(self, slug: str, task: asyncio.Task[int]) -> None:
        self._in_flight.pop(slug, None)
        if task.cancelled():
            logger.info("Snapshot refresh for event %s was cancelled", slug)
            return
        exc = task.exception()
        if exc is not None:
            logger.error(
                "Failed to refresh trading snapshot for event %s", slug, exc_info=exc
            )

    async def drain(self) -> None:
        """Wait for in-flight refreshes; used at shutdown and in tests."""
        tasks = list(self._in_flight.values())
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
