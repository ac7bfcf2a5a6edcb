"""JSON → dataclass mapping for exchange payloads.

Shape problems (a non-object where an object is required, missing ids)
raise MalformedResponseError so callers see one error type for "the
exchange said something we cannot read".
"""

from typing import Any

from src.pm_common.errors import MalformedResponseError
from src.pm_exchange.domain.models import (
    ConditionSnapshot,
    ExchangeOrderResult,
    OrderBook,
    OrderBookLevel,
    OutcomeSnapshot,
    RecentTradeSnapshot,
)


def _require_dict(value: Any, what: str) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise MalformedResponseError(f"{what} is not an object")
    return value


def _require_list(value: Any, what: str) -> list[Any]:
    if value is None:
        return []
    if not isinstance(value, list):
        raise MalformedResponseError(f"{what} is not a list")
    return value


def _require_str(data: dict[str, Any], key: str, what: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value:
        raise MalformedResponseError(f"{what}.{key} missing")
    return value


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def parse_recent_trade(data: Any) -> RecentTradeSnapshot:
    row = _require_dict(data, "recent_trade")
    return RecentTradeSnapshot(
        trade_id=_require_str(row, "trade_id", "recent_trade"),
        token_id=_require_str(row, "token_id", "recent_trade"),
        price=row.get("price"),
        size=row.get("size"),
        side=str(row.get("side") or ""),
        executed_at=_optional_str(row.get("executed_at")),
        buyer_order_id=_optional_str(row.get("buyer_order_id")),
        seller_order_id=_optional_str(row.get("seller_order_id")),
    )


def parse_outcome(data: Any) -> OutcomeSnapshot:
    row = _require_dict(data, "outcome")
    return OutcomeSnapshot(
        token_id=_require_str(row, "token_id", "outcome"),
        best_bid_price=row.get("best_bid_price"),
        best_bid_size=row.get("best_bid_size"),
        best_ask_price=row.get("best_ask_price"),
        best_ask_size=row.get("best_ask_size"),
        open_interest=row.get("open_interest"),
        rolling_24h_volume=row.get("rolling_24h_volume"),
        rolling_total_volume=row.get("rolling_total_volume"),
        last_trade_price=row.get("last_trade_price"),
        last_trade_ts=_optional_str(row.get("last_trade_ts")),
        recent_trades=[
            parse_recent_trade(t)
            for t in _require_list(row.get("recent_trades"), "recent_trades")
        ],
    )


def parse_condition(data: Any) -> ConditionSnapshot:
    row = _require_dict(data, "condition")
    return ConditionSnapshot(
        condition_id=_require_str(row, "condition_id", "condition"),
        status=str(row.get("status") or ""),
        snapshot_ts=_optional_str(row.get("snapshot_ts")),
        outcomes=[parse_outcome(o) for o in _require_list(row.get("outcomes"), "outcomes")],
    )


def parse_condition_snapshots(payload: Any) -> list[ConditionSnapshot]:
    """Parse the /v1/conditions body: {generated_at, conditions: [...]}."""
    body = _require_dict(payload, "response")
    return [parse_condition(c) for c in _require_list(body.get("conditions"), "conditions")]


def _parse_levels(value: Any, what: str) -> list[OrderBookLevel]:
    levels = []
    for item in _require_list(value, what):
        level = _require_dict(item, what)
        levels.append(OrderBookLevel(price=level.get("price"), size=level.get("size")))
    return levels


def parse_order_book(token_id: str, payload: Any) -> OrderBook:
    body = _require_dict(payload, "order book")
    return OrderBook(
        token_id=str(body.get("asset_id") or body.get("token_id") or token_id),
        bids=_parse_levels(body.get("bids"), "bids"),
        asks=_parse_levels(body.get("asks"), "asks"),
        raw=body,
    )


def parse_order_result(payload: Any) -> ExchangeOrderResult:
    body = _require_dict(payload, "order result")
    order_id = body.get("order_id") or body.get("id") or body.get("orderID")
    return ExchangeOrderResult(
        order_id=_optional_str(order_id),
        status=_optional_str(body.get("status")),
        raw=body,
    )
