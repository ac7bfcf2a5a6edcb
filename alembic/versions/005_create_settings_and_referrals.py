"""005: create settings and affiliate_referrals tables, seed fee settings

Revision ID: 005
Revises: 004
Create Date: 2026-02-20
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE settings (
            "group"         TEXT            NOT NULL,
            key             TEXT            NOT NULL,
            value           TEXT            NOT NULL,
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_settings PRIMARY KEY ("group", key)
        );
    """)
    op.execute("""
        INSERT INTO settings ("group", key, value) VALUES
            ('affiliate', 'trade_fee_bps', '100'),
            ('affiliate', 'affiliate_share_bps', '4000')
        ON CONFLICT DO NOTHING;
    """)
    op.execute("""
        CREATE TABLE affiliate_referrals (
            user_id             TEXT            PRIMARY KEY REFERENCES users (id) ON DELETE CASCADE,
            affiliate_user_id   TEXT            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_referrals_not_self CHECK (user_id <> affiliate_user_id)
        );
    """)
    op.execute("CREATE INDEX idx_referrals_affiliate ON affiliate_referrals (affiliate_user_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS affiliate_referrals CASCADE;")
    op.execute("DROP TABLE IF EXISTS settings CASCADE;")
