"""Order domain model: pure dataclass, no SQLAlchemy dependency."""
from dataclasses import dataclass
from datetime import datetime
from decimal import Decimal

from src.pm_common.enums import OrderStatus


@dataclass
class Order:
    """Local record of an order the exchange accepted.

    Created once per acceptance and never mutated here; fill/cancel status
    changes belong to downstream settlement.
    """

    user_id: str
    condition_id: str
    token_id: str
    side: int  # OrderSide
    type: int  # OrderType
    maker_address: str
    taker_address: str
    referrer: str
    fee_rate_bps: int
    # Fee split computed at submission time
    trade_fee_bps: int
    affiliate_share_bps: int
    affiliate_fee_amount: Decimal
    fork_fee_amount: Decimal
    affiliate_user_id: str | None = None
    affiliate: str | None = None
    affiliate_percentage: int | None = None
    # Amounts as submitted (integers, exchange units)
    maker_amount: int | None = None
    price: int | None = None
    shares: int | None = None
    salt: int | None = None
    expiration: datetime | None = None
    exchange_order_id: str | None = None
    status: str = OrderStatus.OPEN.value
    id: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
