# src/pm_market/domain/repository.py
"""Repository Protocol: dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_market.domain.models import Event, Market, RecentTrade


class MarketRepositoryProtocol(Protocol):
    async def get_event_by_slug(self, db: AsyncSession, slug: str) -> Event | None: ...

    async def get_event_condition_ids(
        self, db: AsyncSession, slug: str
    ) -> list[str] | None: ...

    async def list_event_markets(
        self, db: AsyncSession, event_id: str
    ) -> list[Market]: ...

    async def list_recent_trades(
        self, db: AsyncSession, token_id: str, limit: int
    ) -> list[RecentTrade]: ...
