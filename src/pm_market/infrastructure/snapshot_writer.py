"""SnapshotUpsertEngine: apply exchange condition snapshots to the read store.

A whole batch is written in ONE transaction: readers never observe a market
whose aggregates were updated while its outcomes were not.

Per condition:
  markets.current_volume_24h / total_volume = sum over outcomes (missing → 0)
  markets.last_snapshot_at = snapshot_ts, or apply-time now when absent
Per outcome:
  best bid/ask, open interest, last trade, rolling volumes overwritten
  current_price = last_trade_price → best_bid_price → best_ask_price
Per recent trade:
  INSERT ... ON CONFLICT (trade_id) DO UPDATE; the exchange always wins.

Market, condition and outcome updates carry a "not older than what is
stored" guard so last_snapshot_at never moves backwards when two syncs for
the same event race.
"""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_common.datetime_utils import parse_timestamp, utc_now
from src.pm_common.numeric import first_decimal, to_decimal, to_decimal_or_zero
from src.pm_exchange.domain.models import (
    ConditionSnapshot,
    OutcomeSnapshot,
    RecentTradeSnapshot,
)

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_UPDATE_MARKET_SQL = text("""
    UPDATE markets
    SET current_volume_24h = :current_volume_24h,
        total_volume       = :total_volume,
        last_snapshot_at   = :snapshot_at,
        updated_at         = :now
    WHERE condition_id = :condition_id
      AND (last_snapshot_at IS NULL OR last_snapshot_at <= :snapshot_at)
""")

_UPDATE_CONDITION_SQL = text("""
    UPDATE conditions
    SET status      = COALESCE(CAST(:status AS TEXT), status),
        snapshot_ts = :snapshot_at,
        updated_at  = :now
    WHERE id = :condition_id
      AND (snapshot_ts IS NULL OR snapshot_ts <= :snapshot_at)
""")

_UPDATE_OUTCOME_SQL = text("""
    UPDATE outcomes
    SET best_bid_price   = :best_bid_price,
        best_bid_size    = :best_bid_size,
        best_ask_price   = :best_ask_price,
        best_ask_size    = :best_ask_size,
        open_interest    = :open_interest,
        current_price    = :current_price,
        last_trade_price = :last_trade_price,
        last_trade_ts    = :last_trade_ts,
        volume_24h       = :volume_24h,
        total_volume     = :total_volume,
        snapshot_ts      = :snapshot_at,
        updated_at       = :now
    WHERE token_id = :token_id
      AND (snapshot_ts IS NULL OR snapshot_ts <= :snapshot_at)
""")

_UPSERT_TRADE_SQL = text("""
    INSERT INTO outcome_recent_trades (
        trade_id, token_id, price, size, side, executed_at,
        buyer_order_id, seller_order_id, inserted_at
    ) VALUES (
        :trade_id, :token_id, :price, :size, :side, :executed_at,
        :buyer_order_id, :seller_order_id, :inserted_at
    )
    ON CONFLICT (trade_id) DO UPDATE SET
        price           = EXCLUDED.price,
        size            = EXCLUDED.size,
        side            = EXCLUDED.side,
        executed_at     = EXCLUDED.executed_at,
        buyer_order_id  = EXCLUDED.buyer_order_id,
        seller_order_id = EXCLUDED.seller_order_id,
        inserted_at     = EXCLUDED.inserted_at
""")

# ---------------------------------------------------------------------------
# Parameter builders (pure)
# ---------------------------------------------------------------------------


def resolve_current_price(outcome: OutcomeSnapshot) -> Decimal | None:
    """An executed trade beats a resting quote; bid beats ask."""
    return first_decimal(
        outcome.last_trade_price, outcome.best_bid_price, outcome.best_ask_price
    )


def condition_key(condition: ConditionSnapshot) -> str:
    """Row key for a snapshot; conditions.id and markets.condition_id are lower-case."""
    return condition.condition_id.strip().lower()


def build_market_params(
    condition: ConditionSnapshot, snapshot_at: datetime, now: datetime
) -> dict[str, Any]:
    volume_24h = sum(
        (to_decimal_or_zero(o.rolling_24h_volume) for o in condition.outcomes), Decimal("0")
    )
    volume_total = sum(
        (to_decimal_or_zero(o.rolling_total_volume) for o in condition.outcomes), Decimal("0")
    )
    return {
        "condition_id": condition_key(condition),
        "current_volume_24h": volume_24h,
        "total_volume": volume_total,
        "snapshot_at": snapshot_at,
        "now": now,
    }


def build_outcome_params(
    outcome: OutcomeSnapshot, snapshot_at: datetime, now: datetime
) -> dict[str, Any]:
    return {
        "token_id": outcome.token_id,
        "best_bid_price": to_decimal(outcome.best_bid_price),
        "best_bid_size": to_decimal(outcome.best_bid_size),
        "best_ask_price": to_decimal(outcome.best_ask_price),
        "best_ask_size": to_decimal(outcome.best_ask_size),
        "open_interest": to_decimal(outcome.open_interest),
        "current_price": resolve_current_price(outcome),
        "last_trade_price": to_decimal(outcome.last_trade_price),
        "last_trade_ts": parse_timestamp(outcome.last_trade_ts),
        "volume_24h": to_decimal_or_zero(outcome.rolling_24h_volume),
        "total_volume": to_decimal_or_zero(outcome.rolling_total_volume),
        "snapshot_at": snapshot_at,
        "now": now,
    }


def build_trade_params(trade: RecentTradeSnapshot, now: datetime) -> dict[str, Any]:
    return {
        "trade_id": trade.trade_id,
        "token_id": trade.token_id,
        "price": to_decimal_or_zero(trade.price),
        "size": to_decimal_or_zero(trade.size),
        "side": trade.side,
        "executed_at": parse_timestamp(trade.executed_at) or now,
        "buyer_order_id": trade.buyer_order_id,
        "seller_order_id": trade.seller_order_id,
        "inserted_at": now,
    }


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------


class SnapshotUpsertEngine:
    def __init__(self, clock: Callable[[], datetime] = utc_now) -> None:
        self._clock = clock

    async def apply(self, db: AsyncSession, snapshots: Sequence[ConditionSnapshot]) -> int:
        """Write all snapshots atomically; returns the number of conditions applied.

        Opens the transaction itself, so pass a session with none in progress.
        """
        if not snapshots:
            return 0

        now = self._clock()
        async with db.begin():
            for condition in snapshots:
                await self._apply_condition(db, condition, now)

        logger.debug("Applied %d condition snapshots", len(snapshots))
        return len(snapshots)

    async def _apply_condition(
        self, db: AsyncSession, condition: ConditionSnapshot, now: datetime
    ) -> None:
        snapshot_at = parse_timestamp(condition.snapshot_ts) or now

        await db.execute(_UPDATE_MARKET_SQL, build_market_params(condition, snapshot_at, now))
        await db.execute(
            _UPDATE_CONDITION_SQL,
            {
                "condition_id": condition_key(condition),
                "status": condition.status or None,
                "snapshot_at": snapshot_at,
                "now": now,
            },
        )

        for outcome in condition.outcomes:
            await db.execute(
                _UPDATE_OUTCOME_SQL, build_outcome_params(outcome, snapshot_at, now)
            )
            if outcome.recent_trades:
                await db.execute(
                    _UPSERT_TRADE_SQL,
                    [build_trade_params(t, now) for t in outcome.recent_trades],
                )
