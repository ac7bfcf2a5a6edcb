"""Pydantic schemas for pm_market API responses.

Decimals are rendered as strings so prices such as "0.42" round-trip exactly.
"""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel

from src.pm_common.datetime_utils import parse_timestamp
from src.pm_market.domain.models import Market, Outcome, RecentTrade


def _dec(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


def _iso(value: datetime | str | None) -> str | None:
    parsed = parse_timestamp(value)
    return parsed.isoformat() if parsed else None


class OutcomeOut(BaseModel):
    token_id: str
    outcome_index: int
    outcome_text: str
    best_bid_price: str | None
    best_bid_size: str | None
    best_ask_price: str | None
    best_ask_size: str | None
    open_interest: str | None
    current_price: str | None
    last_trade_price: str | None
    last_trade_ts: str | None
    volume_24h: str
    total_volume: str

    @classmethod
    def from_domain(cls, o: Outcome) -> "OutcomeOut":
        return cls(
            token_id=o.token_id,
            outcome_index=o.outcome_index,
            outcome_text=o.outcome_text,
            best_bid_price=_dec(o.best_bid_price),
            best_bid_size=_dec(o.best_bid_size),
            best_ask_price=_dec(o.best_ask_price),
            best_ask_size=_dec(o.best_ask_size),
            open_interest=_dec(o.open_interest),
            current_price=_dec(o.current_price),
            last_trade_price=_dec(o.last_trade_price),
            last_trade_ts=_iso(o.last_trade_ts),
            volume_24h=str(o.volume_24h),
            total_volume=str(o.total_volume),
        )


class MarketOut(BaseModel):
    condition_id: str
    title: str
    is_active: bool
    is_resolved: bool
    current_volume_24h: str
    total_volume: str
    last_snapshot_at: str | None
    outcomes: list[OutcomeOut]

    @classmethod
    def from_domain(cls, m: Market) -> "MarketOut":
        return cls(
            condition_id=m.condition_id,
            title=m.title,
            is_active=m.is_active,
            is_resolved=m.is_resolved,
            current_volume_24h=str(m.current_volume_24h),
            total_volume=str(m.total_volume),
            last_snapshot_at=_iso(m.last_snapshot_at),
            outcomes=[OutcomeOut.from_domain(o) for o in m.outcomes],
        )


class EventMarketsResponse(BaseModel):
    event_id: str
    slug: str
    title: str
    markets: list[MarketOut]
    refresh_triggered: bool


class RefreshResponse(BaseModel):
    slug: str
    conditions_synced: int


class RecentTradeOut(BaseModel):
    trade_id: str
    price: str
    size: str
    side: str
    executed_at: str | None

    @classmethod
    def from_domain(cls, t: RecentTrade) -> "RecentTradeOut":
        return cls(
            trade_id=t.trade_id,
            price=str(t.price),
            size=str(t.size),
            side=t.side,
            executed_at=_iso(t.executed_at),
        )


class RecentTradesResponse(BaseModel):
    token_id: str
    trades: list[RecentTradeOut]


class OrderbookResponse(BaseModel):
    """Exchange /book payload passed through untouched."""

    token_id: str
    book: dict[str, Any]
