"""Fee split between platform and affiliate for one submitted order.

    total     = 2 x trade_fee_bps / 10_000          (both legs of the match)
    affiliate = total x affiliate_share_bps / 10_000 (0 without an affiliate)
    fork      = max(0, total - affiliate)           (platform share)

All arithmetic runs on integer micro-units (1e-6) derived from integer basis
points; amounts become 6-place Decimals only on the way out. total is always
exact (it has at most 4 decimal places); affiliate is rounded half-up to the
micro-unit; fork is the exact remainder, so affiliate + fork == total.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

BPS_DENOMINATOR = 10_000
FEE_LEGS = 2
AMOUNT_DECIMALS = 6
_MICRO_PER_BPS = 10**AMOUNT_DECIMALS // BPS_DENOMINATOR  # 1 bps = 100 micro-units


@dataclass(frozen=True)
class FeeSplit:
    total_fee_amount: Decimal
    affiliate_fee_amount: Decimal
    fork_fee_amount: Decimal


def _div_round_half_up(numerator: int, denominator: int) -> int:
    """Integer division rounding .5 away from zero (inputs are non-negative)."""
    return (2 * numerator + denominator) // (2 * denominator)


def _micro_to_amount(micro: int) -> Decimal:
    return Decimal(micro).scaleb(-AMOUNT_DECIMALS).quantize(Decimal(1).scaleb(-AMOUNT_DECIMALS))


def compute_fee_split(
    trade_fee_bps: int, affiliate_share_bps: int, has_affiliate: bool
) -> FeeSplit:
    if trade_fee_bps < 0:
        raise ValueError(f"trade_fee_bps must be >= 0, got {trade_fee_bps}")
    if not 0 <= affiliate_share_bps <= BPS_DENOMINATOR:
        raise ValueError(
            f"affiliate_share_bps must be between 0 and {BPS_DENOMINATOR}, got {affiliate_share_bps}"
        )

    total_micro = FEE_LEGS * trade_fee_bps * _MICRO_PER_BPS
    affiliate_micro = (
        _div_round_half_up(total_micro * affiliate_share_bps, BPS_DENOMINATOR)
        if has_affiliate
        else 0
    )
    fork_micro = max(0, total_micro - affiliate_micro)

    return FeeSplit(
        total_fee_amount=_micro_to_amount(total_micro),
        affiliate_fee_amount=_micro_to_amount(affiliate_micro),
        fork_fee_amount=_micro_to_amount(fork_micro),
    )


def percent_to_bps(percent: Decimal) -> int:
    """Admin input such as Decimal("1.25") (%) → 125 bps, rounded half-up."""
    return int((percent * 100).quantize(Decimal(1), rounding=ROUND_HALF_UP))
