"""MarketRepository: concrete implementation of MarketRepositoryProtocol.

All queries use raw text() SQL (no ORM) and are read-only. Writes to the
market-data tables happen only in snapshot_writer.py.
"""

from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_market.domain.models import Event, Market, Outcome, RecentTrade

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_GET_EVENT_BY_SLUG_SQL = text("""
    SELECT id, slug, title, status
    FROM events
    WHERE slug = :slug
    LIMIT 1
""")

_GET_EVENT_CONDITION_IDS_SQL = text("""
    SELECT e.id AS event_id, m.condition_id
    FROM events e
    LEFT JOIN markets m ON m.event_id = e.id
    WHERE e.slug = :slug
    ORDER BY m.created_at, m.condition_id
""")

_LIST_EVENT_MARKETS_SQL = text("""
    SELECT condition_id, event_id, title, is_active, is_resolved,
           current_volume_24h, total_volume, last_snapshot_at, updated_at
    FROM markets
    WHERE event_id = :event_id
    ORDER BY created_at, condition_id
""")

_LIST_OUTCOMES_SQL = text("""
    SELECT token_id, condition_id, outcome_index, outcome_text,
           best_bid_price, best_bid_size, best_ask_price, best_ask_size,
           open_interest, current_price, last_trade_price, last_trade_ts,
           volume_24h, total_volume, snapshot_ts
    FROM outcomes
    WHERE condition_id = ANY(CAST(:condition_ids AS TEXT[]))
    ORDER BY condition_id, outcome_index
""")

_LIST_RECENT_TRADES_SQL = text("""
    SELECT trade_id, token_id, price, size, side, executed_at,
           buyer_order_id, seller_order_id
    FROM outcome_recent_trades
    WHERE token_id = :token_id
    ORDER BY executed_at DESC, trade_id DESC
    LIMIT :limit
""")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _row_to_market(row: Any) -> Market:
    return Market(
        condition_id=row.condition_id,
        event_id=row.event_id,
        title=row.title,
        is_active=row.is_active,
        is_resolved=row.is_resolved,
        current_volume_24h=row.current_volume_24h,
        total_volume=row.total_volume,
        last_snapshot_at=row.last_snapshot_at,
        updated_at=row.updated_at,
    )


def _row_to_outcome(row: Any) -> Outcome:
    return Outcome(
        token_id=row.token_id,
        condition_id=row.condition_id,
        outcome_index=row.outcome_index,
        outcome_text=row.outcome_text,
        best_bid_price=row.best_bid_price,
        best_bid_size=row.best_bid_size,
        best_ask_price=row.best_ask_price,
        best_ask_size=row.best_ask_size,
        open_interest=row.open_interest,
        current_price=row.current_price,
        last_trade_price=row.last_trade_price,
        last_trade_ts=row.last_trade_ts,
        volume_24h=row.volume_24h,
        total_volume=row.total_volume,
        snapshot_ts=row.snapshot_ts,
    )


def _row_to_trade(row: Any) -> RecentTrade:
    return RecentTrade(
        trade_id=row.trade_id,
        token_id=row.token_id,
        price=row.price,
        size=row.size,
        side=row.side,
        executed_at=row.executed_at,
        buyer_order_id=row.buyer_order_id,
        seller_order_id=row.seller_order_id,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class MarketRepository:
    async def get_event_by_slug(self, db: AsyncSession, slug: str) -> Event | None:
        result = await db.execute(_GET_EVENT_BY_SLUG_SQL, {"slug": slug})
        row = result.fetchone()
        if row is None:
            return None
        return Event(id=row.id, slug=row.slug, title=row.title, status=row.status)

    async def get_event_condition_ids(
        self, db: AsyncSession, slug: str
    ) -> list[str] | None:
        """Condition ids of every market in the event; None when the slug is unknown."""
        result = await db.execute(_GET_EVENT_CONDITION_IDS_SQL, {"slug": slug})
        rows = result.fetchall()
        if not rows:
            return None
        # LEFT JOIN yields one row with condition_id NULL for an event with no markets
        return [row.condition_id for row in rows if row.condition_id is not None]

    async def list_event_markets(self, db: AsyncSession, event_id: str) -> list[Market]:
        result = await db.execute(_LIST_EVENT_MARKETS_SQL, {"event_id": event_id})
        markets = [_row_to_market(row) for row in result.fetchall()]
        if not markets:
            return markets

        outcome_result = await db.execute(
            _LIST_OUTCOMES_SQL,
            {"condition_ids": [m.condition_id for m in markets]},
        )
        by_condition: dict[str, list[Outcome]] = {}
        for row in outcome_result.fetchall():
            outcome = _row_to_outcome(row)
            by_condition.setdefault(outcome.condition_id, []).append(outcome)
        for market in markets:
            market.outcomes = by_condition.get(market.condition_id, [])
        return markets

    async def list_recent_trades(
        self, db: AsyncSession, token_id: str, limit: int
    ) -> list[RecentTrade]:
        result = await db.execute(
            _LIST_RECENT_TRADES_SQL, {"token_id": token_id, "limit": limit}
        )
        return [_row_to_trade(row) for row in result.fetchall()]
