"""FeeSettingsService: cached read of fee settings, admin update.

Order submission reads fee settings on every request, admins change them
rarely; reads go through a TTLCache and an update invalidates it.
"""

from decimal import Decimal

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_affiliate.domain.models import AffiliateReferral, FeeSettings
from src.pm_affiliate.domain.repository import (
    AffiliateRepositoryProtocol,
    FeeSettingsRepositoryProtocol,
)
from src.pm_affiliate.infrastructure.persistence import (
    AffiliateRepository,
    FeeSettingsRepository,
)
from src.pm_clearing.domain.fee import percent_to_bps
from src.pm_common.cache import TTLCache

FEE_SETTINGS_CACHE_KEY = "fee_settings:affiliate"


class FeeSettingsService:
    def __init__(
        self,
        cache: TTLCache,
        repo: FeeSettingsRepositoryProtocol | None = None,
    ) -> None:
        self._cache = cache
        self._repo: FeeSettingsRepositoryProtocol = repo or FeeSettingsRepository()

    async def get_fee_settings(self, db: AsyncSession) -> FeeSettings:
        cached = self._cache.get(FEE_SETTINGS_CACHE_KEY)
        if cached is not None:
            return cached
        fees = await self._repo.get_fee_settings(db)
        self._cache.set(FEE_SETTINGS_CACHE_KEY, fees)
        return fees

    async def update_fee_settings(
        self,
        db: AsyncSession,
        trade_fee_percent: Decimal,
        affiliate_share_percent: Decimal,
    ) -> FeeSettings:
        fees = FeeSettings(
            trade_fee_bps=percent_to_bps(trade_fee_percent),
            affiliate_share_bps=percent_to_bps(affiliate_share_percent),
        )
        try:
            await self._repo.update_fee_settings(db, fees)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        self._cache.invalidate(FEE_SETTINGS_CACHE_KEY)
        return fees


class ReferralService:
    def __init__(self, repo: AffiliateRepositoryProtocol | None = None) -> None:
        self._repo: AffiliateRepositoryProtocol = repo or AffiliateRepository()

    async def get_referral(
        self, db: AsyncSession, user_id: str
    ) -> AffiliateReferral | None:
        return await self._repo.get_referral(db, user_id)
