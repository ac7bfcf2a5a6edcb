"""Repository Protocols for fee settings and affiliate referrals."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_affiliate.domain.models import AffiliateReferral, FeeSettings


class FeeSettingsRepositoryProtocol(Protocol):
    async def get_fee_settings(self, db: AsyncSession) -> FeeSettings: ...

    async def update_fee_settings(self, db: AsyncSession, fees: FeeSettings) -> None: ...


class AffiliateRepositoryProtocol(Protocol):
    async def get_referral(
        self, db: AsyncSession, user_id: str
    ) -> AffiliateReferral | None: ...
