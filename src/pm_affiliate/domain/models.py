"""Fee configuration and referral models: pure dataclasses."""

from dataclasses import dataclass


@dataclass(frozen=True)
class FeeSettings:
    trade_fee_bps: int
    affiliate_share_bps: int


@dataclass(frozen=True)
class AffiliateReferral:
    user_id: str
    affiliate_user_id: str
    affiliate_address: str | None
