"""Raw SQL access to the settings and affiliate_referrals tables.

Fee settings are stored as text key/value rows in the "affiliate" group,
the same table admin tooling edits. Missing or non-integer values read as 0.
"""

import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.pm_affiliate.domain.models import AffiliateReferral, FeeSettings
from src.pm_common.enums import SettingsGroup

logger = logging.getLogger(__name__)

TRADE_FEE_BPS_KEY = "trade_fee_bps"
AFFILIATE_SHARE_BPS_KEY = "affiliate_share_bps"

_GET_GROUP_SQL = text("""
    SELECT key, value
    FROM settings
    WHERE "group" = :group
""")

_UPSERT_SETTING_SQL = text("""
    INSERT INTO settings ("group", key, value, updated_at)
    VALUES (:group, :key, :value, NOW())
    ON CONFLICT ("group", key) DO UPDATE
    SET value = EXCLUDED.value, updated_at = NOW()
""")

_GET_REFERRAL_SQL = text("""
    SELECT r.user_id, r.affiliate_user_id, u.address AS affiliate_address
    FROM affiliate_referrals r
    JOIN users u ON u.id = r.affiliate_user_id
    WHERE r.user_id = :user_id
    LIMIT 1
""")


def _parse_bps(raw: Any, key: str) -> int:
    if raw is None or str(raw).strip() == "":
        return 0
    try:
        return int(str(raw).strip())
    except ValueError:
        logger.warning("Ignoring non-integer fee setting %s=%r", key, raw)
        return 0


class FeeSettingsRepository:
    async def get_fee_settings(self, db: AsyncSession) -> FeeSettings:
        result = await db.execute(_GET_GROUP_SQL, {"group": SettingsGroup.AFFILIATE.value})
        values = {row.key: row.value for row in result.fetchall()}
        return FeeSettings(
            trade_fee_bps=_parse_bps(values.get(TRADE_FEE_BPS_KEY), TRADE_FEE_BPS_KEY),
            affiliate_share_bps=_parse_bps(
                values.get(AFFILIATE_SHARE_BPS_KEY), AFFILIATE_SHARE_BPS_KEY
            ),
        )

    async def update_fee_settings(self, db: AsyncSession, fees: FeeSettings) -> None:
        """Caller owns the transaction."""
        await db.execute(
            _UPSERT_SETTING_SQL,
            [
                {
                    "group": SettingsGroup.AFFILIATE.value,
                    "key": TRADE_FEE_BPS_KEY,
                    "value": str(fees.trade_fee_bps),
                },
                {
                    "group": SettingsGroup.AFFILIATE.value,
                    "key": AFFILIATE_SHARE_BPS_KEY,
                    "value": str(fees.affiliate_share_bps),
                },
            ],
        )


class AffiliateRepository:
    async def get_referral(
        self, db: AsyncSession, user_id: str
    ) -> AffiliateReferral | None:
        result = await db.execute(_GET_REFERRAL_SQL, {"user_id": user_id})
        row = result.fetchone()
        if row is None:
            return None
        return AffiliateReferral(
            user_id=row.user_id,
            affiliate_user_id=row.affiliate_user_id,
            affiliate_address=row.affiliate_address,
        )
