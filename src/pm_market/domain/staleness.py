"""StalenessGate: is a market's cached snapshot too old to serve as-is?

A market is stale when it has never been snapshotted, when its
last_snapshot_at cannot be parsed, or when it is strictly older than
max_age_ms. A snapshot exactly max_age_ms old is still fresh.
"""

from collections.abc import Callable, Iterable
from datetime import datetime, timedelta

from config.settings import settings
from src.pm_common.datetime_utils import parse_timestamp, utc_now
from src.pm_market.domain.models import Market


class StalenessGate:
    def __init__(
        self,
        max_age_ms: int | None = None,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        max_age_ms = settings.SNAPSHOT_MAX_AGE_MS if max_age_ms is None else max_age_ms
        if max_age_ms < 0:
            raise ValueError("max_age_ms must be >= 0")
        self._max_age = timedelta(milliseconds=max_age_ms)
        self._clock = clock

    def should_refresh(self, market: Market) -> bool:
        snapshot_at = parse_timestamp(market.last_snapshot_at)
        if snapshot_at is None:
            return True
        return self._clock() - snapshot_at > self._max_age

    def any_stale(self, markets: Iterable[Market]) -> bool:
        return any(self.should_refresh(m) for m in markets)
