"""Domain models for pm_market: pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal


@dataclass
class Event:
    id: str
    slug: str
    title: str
    status: str


@dataclass
class Outcome:
    token_id: str
    condition_id: str
    outcome_index: int
    outcome_text: str
    best_bid_price: Decimal | None
    best_bid_size: Decimal | None
    best_ask_price: Decimal | None
    best_ask_size: Decimal | None
    open_interest: Decimal | None
    current_price: Decimal | None
    last_trade_price: Decimal | None
    last_trade_ts: datetime | None
    volume_24h: Decimal
    total_volume: Decimal
    snapshot_ts: datetime | None


@dataclass
class Market:
    condition_id: str
    event_id: str
    title: str
    is_active: bool
    is_resolved: bool
    current_volume_24h: Decimal
    total_volume: Decimal
    # datetime from the DB; str tolerated for values that never went through it
    last_snapshot_at: datetime | str | None
    updated_at: datetime | None = None
    outcomes: list[Outcome] = field(default_factory=list)


@dataclass
class RecentTrade:
    trade_id: str
    token_id: str
    price: Decimal
    size: Decimal
    side: str
    executed_at: datetime
    buyer_order_id: str | None
    seller_order_id: str | None
