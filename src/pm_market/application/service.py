"""MarketApplicationService: read side of the market-data store.

get_event_markets() serves cached data immediately and, when any market of
the event is stale, hands the event to the BackgroundRefresher. The request
never waits for the exchange.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.cache import TTLCache
from src.pm_common.errors import AppError, EventNotFoundError, InternalError, SnapshotRefreshError
from src.pm_exchange.infrastructure.client import ExchangeClient
from src.pm_market.application.schemas import (
    EventMarketsResponse,
    MarketOut,
    OrderbookResponse,
    RecentTradeOut,
    RecentTradesResponse,
    RefreshResponse,
)
from src.pm_market.application.sync_service import BackgroundRefresher, SnapshotSyncService
from src.pm_market.domain.repository import MarketRepositoryProtocol
from src.pm_market.domain.staleness import StalenessGate
from src.pm_market.infrastructure.persistence import MarketRepository

logger = logging.getLogger(__name__)

_ORDERBOOK_KEY_PREFIX = "orderbook:"


class MarketApplicationService:
    def __init__(
        self,
        sync_service: SnapshotSyncService,
        refresher: BackgroundRefresher,
        exchange: ExchangeClient,
        orderbook_cache: TTLCache,
        gate: StalenessGate | None = None,
        repo: MarketRepositoryProtocol | None = None,
    ) -> None:
        self._sync_service = sync_service
        self._refresher = refresher
        self._exchange = exchange
        self._orderbook_cache = orderbook_cache
        self._gate = gate or StalenessGate()
        self._repo: MarketRepositoryProtocol = repo or MarketRepository()

    async def get_event_markets(self, db: AsyncSession, slug: str) -> EventMarketsResponse:
        event = await self._repo.get_event_by_slug(db, slug)
        if event is None:
            raise EventNotFoundError(slug)

        markets = await self._repo.list_event_markets(db, event.id)
        refresh_triggered = False
        if self._gate.any_stale(markets):
            refresh_triggered = self._refresher.trigger(slug)

        return EventMarketsResponse(
            event_id=event.id,
            slug=event.slug,
            title=event.title,
            markets=[MarketOut.from_domain(m) for m in markets],
            refresh_triggered=refresh_triggered,
        )

    async def refresh_event(self, slug: str) -> RefreshResponse:
        """Synchronous (awaited) refresh for an explicit user action."""
        try:
            synced = await self._sync_service.sync_event(slug)
        except Exception as exc:
            logger.error("Failed to refresh market snapshot for %s", slug, exc_info=exc)
            raise SnapshotRefreshError() from exc
        return RefreshResponse(slug=slug, conditions_synced=synced)

    async def get_recent_trades(
        self, db: AsyncSession, token_id: str, limit: int
    ) -> RecentTradesResponse:
        trades = await self._repo.list_recent_trades(db, token_id, limit)
        return RecentTradesResponse(
            token_id=token_id, trades=[RecentTradeOut.from_domain(t) for t in trades]
        )

    async def get_orderbook(self, token_id: str) -> OrderbookResponse:
        key = f"{_ORDERBOOK_KEY_PREFIX}{token_id}"
        cached = self._orderbook_cache.get(key)
        if cached is not None:
            return cached

        try:
            book = await self._exchange.fetch_order_book(token_id)
        except AppError as exc:
            logger.error("Unexpected error while fetching order book %s", token_id, exc_info=exc)
            raise InternalError() from exc

        resp = OrderbookResponse(token_id=token_id, book=book.raw)
        self._orderbook_cache.set(key, resp)
        return resp
