"""004: create outcome_recent_trades table

Revision ID: 004
Revises: 003
Create Date: 2026-02-20
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE outcome_recent_trades (
            trade_id            TEXT            PRIMARY KEY,
            token_id            TEXT            NOT NULL REFERENCES outcomes (token_id) ON DELETE CASCADE,
            price               NUMERIC(20, 6)  NOT NULL,
            size                NUMERIC(20, 6)  NOT NULL,
            side                TEXT            NOT NULL,
            executed_at         TIMESTAMPTZ     NOT NULL,
            buyer_order_id      TEXT,
            seller_order_id     TEXT,
            inserted_at         TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute(
        "CREATE INDEX idx_recent_trades_token_executed "
        "ON outcome_recent_trades (token_id, executed_at DESC);"
    )
    op.execute(
        "COMMENT ON TABLE outcome_recent_trades IS "
        "'Exchange trades mirrored per outcome; trade_id is the idempotency key';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS outcome_recent_trades CASCADE;")
