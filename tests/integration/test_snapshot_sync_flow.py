"""SnapshotUpsertEngine against a real PostgreSQL schema."""
from datetime import UTC, datetime
from decimal import Decimal

import pytest
from sqlalchemy import text

from src.pm_exchange.domain.models import ConditionSnapshot, OutcomeSnapshot, RecentTradeSnapshot
from src.pm_market.infrastructure.persistence import MarketRepository
from src.pm_market.infrastructure.snapshot_writer import SnapshotUpsertEngine

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def _snapshot(ids: dict, snapshot_ts: str, trade_price: str) -> ConditionSnapshot:
    return ConditionSnapshot(
        condition_id=ids["condition_id"],
        status="active",
        snapshot_ts=snapshot_ts,
        outcomes=[
            OutcomeSnapshot(
                token_id=ids["yes"], best_bid_price="0.42", best_ask_price="0.45",
                rolling_24h_volume="10", rolling_total_volume="100",
                recent_trades=[RecentTradeSnapshot(
                    trade_id=f"tr-{ids['yes']}", token_id=ids["yes"], price=trade_price,
                    size="5", side="buy", executed_at=snapshot_ts,
                )],
            ),
            OutcomeSnapshot(token_id=ids["no"], rolling_24h_volume="2.5"),
        ],
    )


@pytest.mark.asyncio
async def test_apply_is_idempotent_and_monotonic(session_factory, seeded_market) -> None:
    ids = seeded_market
    engine = SnapshotUpsertEngine(clock=lambda: NOW)

    async with session_factory() as db:
        await engine.apply(db, [_snapshot(ids, "2025-06-01T11:59:00Z", "0.44")])
    async with session_factory() as db:
        await engine.apply(db, [_snapshot(ids, "2025-06-01T11:59:30Z", "0.47")])
    # an older snapshot arriving late must not move last_snapshot_at back
    async with session_factory() as db:
        await engine.apply(db, [_snapshot(ids, "2025-06-01T11:00:00Z", "0.47")])

    async with session_factory() as db:
        trades = (await db.execute(
            text("SELECT price FROM outcome_recent_trades WHERE token_id = :yes"), ids
        )).fetchall()
        markets = await MarketRepository().list_event_markets(db, ids["event_id"])

    assert [t.price for t in trades] == [Decimal("0.47")]
    market = markets[0]
    assert market.last_snapshot_at == datetime(2025, 6, 1, 11, 59, 30, tzinfo=UTC)
    assert market.current_volume_24h == Decimal("12.5")
    yes = next(o for o in market.outcomes if o.token_id == ids["yes"])
    assert yes.current_price == Decimal("0.42")
