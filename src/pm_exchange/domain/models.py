"""Exchange (CLOB) snapshot models: pure dataclasses, no I/O.

Numeric fields are left exactly as the exchange sent them (number, numeric
string or None). Coercion happens once, in the snapshot writer, through
pm_common.numeric.to_decimal().
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RecentTradeSnapshot:
    trade_id: str
    token_id: str
    price: Any
    size: Any
    side: str
    executed_at: str | None
    buyer_order_id: str | None = None
    seller_order_id: str | None = None


@dataclass
class OutcomeSnapshot:
    token_id: str
    best_bid_price: Any = None
    best_bid_size: Any = None
    best_ask_price: Any = None
    best_ask_size: Any = None
    open_interest: Any = None
    rolling_24h_volume: Any = None
    rolling_total_volume: Any = None
    last_trade_price: Any = None
    last_trade_ts: str | None = None
    recent_trades: list[RecentTradeSnapshot] = field(default_factory=list)


@dataclass
class ConditionSnapshot:
    condition_id: str
    status: str
    snapshot_ts: str | None
    outcomes: list[OutcomeSnapshot] = field(default_factory=list)


@dataclass
class OrderBookLevel:
    price: Any
    size: Any


@dataclass
class OrderBook:
    """Exchange order book for one token, plus the raw payload for pass-through."""

    token_id: str
    bids: list[OrderBookLevel]
    asks: list[OrderBookLevel]
    raw: dict[str, Any]


@dataclass
class ExchangeOrderResult:
    """Accepted order as echoed by the exchange."""

    order_id: str | None
    status: str | None
    raw: dict[str, Any]
