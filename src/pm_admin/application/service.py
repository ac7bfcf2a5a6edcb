# src/pm_admin/application/service.py
"""Admin application service: platform fee configuration."""
from decimal import Decimal

from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_affiliate.application.service import FeeSettingsService
from src.pm_affiliate.domain.models import FeeSettings
from src.pm_clearing.domain.fee import BPS_DENOMINATOR

_PERCENT_PER_BPS = Decimal(100) / Decimal(BPS_DENOMINATOR)


class FeeSettingsUpdateRequest(BaseModel):
    trade_fee_percent: Decimal = Field(ge=0, le=9)
    affiliate_share_percent: Decimal = Field(ge=0, le=100)


class FeeSettingsOut(BaseModel):
    trade_fee_bps: int
    affiliate_share_bps: int
    trade_fee_percent: Decimal
    affiliate_share_percent: Decimal

    @classmethod
    def from_domain(cls, fees: FeeSettings) -> "FeeSettingsOut":
        return cls(
            trade_fee_bps=fees.trade_fee_bps,
            affiliate_share_bps=fees.affiliate_share_bps,
            trade_fee_percent=fees.trade_fee_bps * _PERCENT_PER_BPS,
            affiliate_share_percent=fees.affiliate_share_bps * _PERCENT_PER_BPS,
        )


class AdminService:
    def __init__(self, fee_settings: FeeSettingsService) -> None:
        self._fee_settings = fee_settings

    async def get_fee_settings(self, db: AsyncSession) -> FeeSettingsOut:
        return FeeSettingsOut.from_domain(await self._fee_settings.get_fee_settings(db))

    async def update_fee_settings(
        self, db: AsyncSession, body: FeeSettingsUpdateRequest
    ) -> FeeSettingsOut:
        fees = await self._fee_settings.update_fee_settings(
            db, body.trade_fee_percent, body.affiliate_share_percent
        )
        return FeeSettingsOut.from_domain(fees)
