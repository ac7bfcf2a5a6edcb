"""SnapshotSyncService and BackgroundRefresher tests."""
import asyncio
import logging
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_exchange.domain.models import ConditionSnapshot
from src.pm_market.application.sync_service import BackgroundRefresher, SnapshotSyncService


def _session_factory() -> MagicMock:
    """Callable returning a fresh async-context-manager session each time."""
    factory = MagicMock()

    def _new_session():
        cm = AsyncMock()
        cm.__aenter__ = AsyncMock(return_value=MagicMock(name="session"))
        cm.__aexit__ = AsyncMock(return_value=False)
        return cm

    factory.side_effect = _new_session
    return factory


def _snap(cid: str) -> ConditionSnapshot:
    return ConditionSnapshot(condition_id=cid, status="active", snapshot_ts=None)


@pytest.fixture
def repo() -> MagicMock:
    repo = MagicMock()
    repo.get_event_condition_ids = AsyncMock(return_value=["0xa", "0xb"])
    return repo


@pytest.fixture
def fetcher() -> MagicMock:
    fetcher = MagicMock()
    fetcher.sync_conditions = AsyncMock(return_value=[_snap("0xa"), _snap("0xb")])
    return fetcher


@pytest.fixture
def writer() -> MagicMock:
    writer = MagicMock()
    writer.apply = AsyncMock(return_value=2)
    return writer


class TestSyncEvent:
    @pytest.mark.asyncio
    async def test_fetches_and_applies(self, repo, fetcher, writer) -> None:
        factory = _session_factory()
        svc = SnapshotSyncService(fetcher, factory, repo=repo, writer=writer)

        assert await svc.sync_event("rain") == 2
        fetcher.sync_conditions.assert_awaited_once_with(["0xa", "0xb"])
        writer.apply.assert_awaited_once()
        # lookup and write use separate sessions
        assert factory.call_count == 2

    @pytest.mark.asyncio
    async def test_unknown_event_is_noop(self, repo, fetcher, writer) -> None:
        repo.get_event_condition_ids = AsyncMock(return_value=None)
        svc = SnapshotSyncService(fetcher, _session_factory(), repo=repo, writer=writer)
        assert await svc.sync_event("nope") == 0
        fetcher.sync_conditions.assert_not_called()
        writer.apply.assert_not_called()

    @pytest.mark.asyncio
    async def test_no_snapshots_skips_write(self, repo, fetcher, writer) -> None:
        fetcher.sync_conditions = AsyncMock(return_value=[])
        svc = SnapshotSyncService(fetcher, _session_factory(), repo=repo, writer=writer)
        assert await svc.sync_event("rain") == 0
        writer.apply.assert_not_called()

    @pytest.mark.asyncio
    async def test_write_failure_propagates(self, repo, fetcher, writer) -> None:
        writer.apply = AsyncMock(side_effect=RuntimeError("db down"))
        svc = SnapshotSyncService(fetcher, _session_factory(), repo=repo, writer=writer)
        with pytest.raises(RuntimeError):
            await svc.sync_event("rain")


class TestBackgroundRefresher:
    @pytest.mark.asyncio
    async def test_trigger_runs_sync(self) -> None:
        sync = MagicMock()
        sync.sync_event = AsyncMock(return_value=1)
        refresher = BackgroundRefresher(sync)

        assert refresher.trigger("rain") is True
        await refresher.drain()
        sync.sync_event.assert_awaited_once_with("rain")
        assert refresher.in_flight() == []

    @pytest.mark.asyncio
    async def test_dedupes_per_slug(self) -> None:
        gate = asyncio.Event()

        async def slow_sync(slug: str) -> int:
            await gate.wait()
            return 0

        sync = MagicMock()
        sync.sync_event = AsyncMock(side_effect=slow_sync)
        refresher = BackgroundRefresher(sync)

        assert refresher.trigger("rain") is True
        assert refresher.trigger("rain") is False
        assert refresher.trigger("snow") is True
        assert refresher.in_flight() == ["rain", "snow"]

        gate.set()
        await refresher.drain()
        assert sync.sync_event.await_count == 2

    @pytest.mark.asyncio
    async def test_failure_is_logged_not_raised(self, caplog) -> None:
        sync = MagicMock()
        sync.sync_event = AsyncMock(side_effect=RuntimeError("exchange down"))
        refresher = BackgroundRefresher(sync)

        with caplog.at_level(logging.ERROR):
            refresher.trigger("rain")
            await refresher.drain()
            # done-callbacks run on the next loop iteration
            await asyncio.sleep(0)

        assert "Failed to refresh trading snapshot for event rain" in caplog.text
        assert refresher.in_flight() == []
