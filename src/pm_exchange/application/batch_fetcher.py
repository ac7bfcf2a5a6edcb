"""BatchFetcher: chunked, failure-isolated snapshot retrieval.

The exchange accepts at most CLOB_BATCH_SIZE ids per /v1/conditions call.
Chunks are fetched one after another (never concurrently) to bound load on
the exchange. A failing chunk is logged and skipped, so an unhealthy shard
costs coverage for those conditions only.
"""

import logging
from collections.abc import Sequence
from typing import Protocol, TypeVar

from config.settings import settings
from src.pm_exchange.domain.models import ConditionSnapshot

logger = logging.getLogger(__name__)

T = TypeVar("T")


class SnapshotSource(Protocol):
    async def fetch_condition_snapshots(
        self, condition_ids: Sequence[str], recent_trades_limit: int = 3
    ) -> list[ConditionSnapshot]: ...


def chunk(items: Sequence[T], size: int) -> list[list[T]]:
    if size < 1:
        raise ValueError(f"chunk size must be >= 1, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class BatchFetcher:
    def __init__(
        self,
        client: SnapshotSource,
        batch_size: int | None = None,
        recent_trades_limit: int | None = None,
    ) -> None:
        self._client = client
        self._batch_size = batch_size or settings.CLOB_BATCH_SIZE
        self._recent_trades_limit = (
            recent_trades_limit
            if recent_trades_limit is not None
            else settings.CLOB_RECENT_TRADES_LIMIT
        )

    async def sync_conditions(self, condition_ids: Sequence[str]) -> list[ConditionSnapshot]:
        """Fetch snapshots for all ids; the result may be partial, never raises per chunk."""
        if not condition_ids:
            return []

        snapshots: list[ConditionSnapshot] = []
        failed_chunks = 0
        chunks = chunk(condition_ids, self._batch_size)
        for ids in chunks:
            try:
                snapshots.extend(
                    await self._client.fetch_condition_snapshots(ids, self._recent_trades_limit)
                )
            except Exception:
                failed_chunks += 1
                logger.warning(
                    "Failed to fetch exchange snapshots for conditions [%s]",
                    ", ".join(ids),
                    exc_info=True,
                )

        if failed_chunks:
            logger.info(
                "Snapshot fetch partial: %d/%d chunks failed, %d conditions returned",
                failed_chunks,
                len(chunks),
                len(snapshots),
            )
        return snapshots
