# src/pm_order/application/schemas.py
import re
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, StrictInt, field_validator

from src.pm_common.numeric import to_decimal
from src.pm_order.domain.models import Order

# Exchange amounts are unsigned base-10 strings; no sign, exponent or padding
_AMOUNT_RE = re.compile(r"\d+(\.\d+)?")


class StoreOrderRequest(BaseModel):
    condition_id: str
    token_id: str
    side: StrictInt
    type: StrictInt
    maker_amount: str | None = None
    price: str | None = None
    shares: str | None = None

    @field_validator("condition_id")
    @classmethod
    def normalize_condition_id(cls, v: str) -> str:
        # conditions.id is stored lower-case
        v = v.strip().lower()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("side", "type")
    @classmethod
    def zero_or_one(cls, v: int) -> int:
        if v not in (0, 1):
            raise ValueError("must be 0 or 1")
        return v

    @field_validator("maker_amount", "price", "shares")
    @classmethod
    def plain_amount(cls, v: str | None) -> str | None:
        if v is not None and not _AMOUNT_RE.fullmatch(v):
            raise ValueError("must be an unsigned decimal string")
        return v


def to_exchange_int(value: str | None) -> int | None:
    """Integer exchange units from a plain decimal string; fractions are truncated."""
    parsed = to_decimal(value)
    return int(parsed) if parsed is not None else None


class OrderResponse(BaseModel):
    id: str
    exchange_order_id: str | None
    condition_id: str
    token_id: str
    side: int
    type: int
    status: str
    maker_address: str
    maker_amount: int | None
    price: int | None
    shares: int | None
    fee_rate_bps: int
    trade_fee_bps: int
    affiliate_share_bps: int
    affiliate_fee_amount: Decimal
    fork_fee_amount: Decimal
    affiliate_user_id: str | None
    created_at: datetime | None = None

    @classmethod
    def from_domain(cls, order: Order) -> "OrderResponse":
        return cls(
            id=str(order.id),
            exchange_order_id=order.exchange_order_id,
            condition_id=order.condition_id,
            token_id=order.token_id,
            side=order.side,
            type=order.type,
            status=order.status,
            maker_address=order.maker_address,
            maker_amount=order.maker_amount,
            price=order.price,
            shares=order.shares,
            fee_rate_bps=order.fee_rate_bps,
            trade_fee_bps=order.trade_fee_bps,
            affiliate_share_bps=order.affiliate_share_bps,
            affiliate_fee_amount=order.affiliate_fee_amount,
            fork_fee_amount=order.fork_fee_amount,
            affiliate_user_id=order.affiliate_user_id,
            created_at=order.created_at,
        )


class OrderListResponse(BaseModel):
    items: list[OrderResponse]
    next_cursor: str | None
    has_more: bool
