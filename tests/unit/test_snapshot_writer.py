"""SnapshotUpsertEngine tests with a mocked AsyncSession."""
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.pm_exchange.domain.models import ConditionSnapshot, OutcomeSnapshot, RecentTradeSnapshot
from src.pm_market.infrastructure.snapshot_writer import (
    SnapshotUpsertEngine,
    build_market_params,
    build_trade_params,
    resolve_current_price,
)

NOW = datetime(2025, 6, 1, 12, 0, tzinfo=UTC)


def _make_db() -> AsyncMock:
    """DB mock whose begin() works as an async context manager."""
    db = AsyncMock()
    tx = AsyncMock()
    tx.__aenter__ = AsyncMock(return_value=None)
    tx.__aexit__ = AsyncMock(return_value=False)
    db.begin = MagicMock(return_value=tx)
    db.execute.return_value = MagicMock()
    return db


def _trade(price: str = "0.44", size: str = "5") -> RecentTradeSnapshot:
    return RecentTradeSnapshot(
        trade_id="tr-1", token_id="t-yes", price=price, size=size, side="buy",
        executed_at="2025-06-01T11:59:00Z", buyer_order_id="b-1",
    )


def _condition(**kwargs) -> ConditionSnapshot:
    defaults = dict(
        condition_id="0xabc",
        status="active",
        snapshot_ts="2025-06-01T11:59:30Z",
        outcomes=[
            OutcomeSnapshot(
                token_id="t-yes", best_bid_price="0.42", best_ask_price="0.45",
                rolling_24h_volume="10.5", rolling_total_volume="100",
                recent_trades=[_trade()],
            ),
            OutcomeSnapshot(
                token_id="t-no", best_bid_price="0.55",
                rolling_24h_volume=None, rolling_total_volume="NaN",
            ),
        ],
    )
    defaults.update(kwargs)
    return ConditionSnapshot(**defaults)


def _sql_calls(db: AsyncMock, fragment: str) -> list:
    return [c for c in db.execute.call_args_list if fragment in str(c.args[0])]


class TestPureBuilders:
    def test_current_price_fallback_to_bid(self) -> None:
        outcome = OutcomeSnapshot(token_id="t", last_trade_price=None,
                                  best_bid_price="0.42", best_ask_price="0.45")
        assert resolve_current_price(outcome) == Decimal("0.42")

    def test_current_price_prefers_last_trade(self) -> None:
        outcome = OutcomeSnapshot(token_id="t", last_trade_price="0.5", best_bid_price="0.42")
        assert resolve_current_price(outcome) == Decimal("0.5")

    def test_current_price_ask_then_none(self) -> None:
        assert resolve_current_price(OutcomeSnapshot(token_id="t", best_ask_price=0.45)) == Decimal("0.45")
        assert resolve_current_price(OutcomeSnapshot(token_id="t")) is None

    def test_market_volumes_sum_with_missing_as_zero(self) -> None:
        params = build_market_params(_condition(), NOW, NOW)
        assert params["current_volume_24h"] == Decimal("10.5")
        assert params["total_volume"] == Decimal("100")

    def test_trade_defaults(self) -> None:
        params = build_trade_params(
            RecentTradeSnapshot(trade_id="x", token_id="t", price=None, size="bad",
                                side="sell", executed_at=None),
            NOW,
        )
        assert params["price"] == Decimal("0")
        assert params["size"] == Decimal("0")
        assert params["executed_at"] == NOW
        assert params["inserted_at"] == NOW


class TestApply:
    @pytest.mark.asyncio
    async def test_empty_batch_opens_no_transaction(self) -> None:
        db = _make_db()
        assert await SnapshotUpsertEngine(clock=lambda: NOW).apply(db, []) == 0
        db.begin.assert_not_called()
        db.execute.assert_not_called()

    @pytest.mark.asyncio
    async def test_single_transaction_for_batch(self) -> None:
        db = _make_db()
        engine = SnapshotUpsertEngine(clock=lambda: NOW)
        applied = await engine.apply(db, [_condition(), _condition(condition_id="0xdef")])
        assert applied == 2
        db.begin.assert_called_once()

    @pytest.mark.asyncio
    async def test_outcome_current_price_from_bid(self) -> None:
        db = _make_db()
        await SnapshotUpsertEngine(clock=lambda: NOW).apply(db, [_condition()])
        outcome_params = [c.args[1] for c in _sql_calls(db, "UPDATE outcomes")]
        yes = next(p for p in outcome_params if p["token_id"] == "t-yes")
        assert yes["current_price"] == Decimal("0.42")
        no = next(p for p in outcome_params if p["token_id"] == "t-no")
        assert no["total_volume"] == Decimal("0")

    @pytest.mark.asyncio
    async def test_market_update_uses_snapshot_ts_and_guard(self) -> None:
        db = _make_db()
        await SnapshotUpsertEngine(clock=lambda: NOW).apply(db, [_condition()])
        (call,) = _sql_calls(db, "UPDATE markets")
        assert "last_snapshot_at <= :snapshot_at" in str(call.args[0])
        assert call.args[1]["snapshot_at"] == datetime(2025, 6, 1, 11, 59, 30, tzinfo=UTC)

    @pytest.mark.asyncio
    async def test_missing_snapshot_ts_uses_now(self) -> None:
        db = _make_db()
        await SnapshotUpsertEngine(clock=lambda: NOW).apply(db, [_condition(snapshot_ts=None)])
        (call,) = _sql_calls(db, "UPDATE markets")
        assert call.args[1]["snapshot_at"] == NOW

    @pytest.mark.asyncio
    async def test_mixed_case_condition_id_matches_stored_rows(self) -> None:
        db = _make_db()
        await SnapshotUpsertEngine(clock=lambda: NOW).apply(
            db, [_condition(condition_id=" 0xABC ")]
        )
        (market,) = _sql_calls(db, "UPDATE markets")
        (condition,) = _sql_calls(db, "UPDATE conditions")
        assert market.args[1]["condition_id"] == "0xabc"
        assert condition.args[1]["condition_id"] == "0xabc"

    @pytest.mark.asyncio
    async def test_trade_upsert_overwrites_with_incoming_values(self) -> None:
        db = _make_db()
        engine = SnapshotUpsertEngine(clock=lambda: NOW)
        first = _condition()
        second = _condition()
        second.outcomes[0].recent_trades = [_trade(price="0.47", size="9")]

        await engine.apply(db, [first])
        await engine.apply(db, [second])

        trade_calls = _sql_calls(db, "INSERT INTO outcome_recent_trades")
        assert len(trade_calls) == 2
        sql = str(trade_calls[0].args[0])
        assert "ON CONFLICT (trade_id) DO UPDATE" in sql
        assert "EXCLUDED.price" in sql and "EXCLUDED.seller_order_id" in sql
        last_params = trade_calls[-1].args[1]
        assert isinstance(last_params, list)
        assert last_params[0]["trade_id"] == "tr-1"
        assert last_params[0]["price"] == Decimal("0.47")
        assert last_params[0]["size"] == Decimal("9")

    @pytest.mark.asyncio
    async def test_error_propagates_out_of_transaction(self) -> None:
        db = _make_db()
        db.execute.side_effect = RuntimeError("deadlock")
        with pytest.raises(RuntimeError):
            await SnapshotUpsertEngine(clock=lambda: NOW).apply(db, [_condition()])
        tx = db.begin.return_value
        tx.__aexit__.assert_awaited_once()
        assert tx.__aexit__.await_args.args[0] is RuntimeError
