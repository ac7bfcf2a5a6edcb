"""006: create orders table

Revision ID: 006
Revises: 005
Create Date: 2026-02-20
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE orders (
            id                      TEXT            PRIMARY KEY DEFAULT gen_random_uuid()::text,
            user_id                 TEXT            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            condition_id            TEXT            NOT NULL REFERENCES conditions (id),
            token_id                TEXT            NOT NULL REFERENCES outcomes (token_id),
            type                    SMALLINT        NOT NULL,
            side                    SMALLINT        NOT NULL,
            price                   BIGINT,
            shares                  BIGINT,
            maker_amount            BIGINT,
            status                  TEXT            NOT NULL DEFAULT 'open',
            maker_address           TEXT            NOT NULL,
            taker_address           TEXT            NOT NULL,
            salt                    NUMERIC(78, 0),
            expiration              TIMESTAMPTZ,
            fee_rate_bps            INT             NOT NULL,
            referrer                TEXT            NOT NULL,
            affiliate               TEXT,
            affiliate_percentage    INT,
            affiliate_user_id       TEXT            REFERENCES users (id),
            trade_fee_bps           INT             NOT NULL DEFAULT 0,
            affiliate_share_bps     INT             NOT NULL DEFAULT 0,
            affiliate_fee_amount    NUMERIC(20, 6)  NOT NULL DEFAULT 0,
            fork_fee_amount         NUMERIC(20, 6)  NOT NULL DEFAULT 0,
            exchange_order_id       TEXT,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_orders_type     CHECK (type IN (0, 1)),
            CONSTRAINT ck_orders_side     CHECK (side IN (0, 1)),
            CONSTRAINT ck_orders_status   CHECK (status IN ('open', 'filled', 'cancelled')),
            CONSTRAINT ck_orders_fees_gte_0 CHECK (
                trade_fee_bps >= 0 AND affiliate_share_bps >= 0
                AND affiliate_fee_amount >= 0 AND fork_fee_amount >= 0
            ),
            CONSTRAINT ck_orders_no_affiliate_no_share CHECK (
                affiliate_user_id IS NOT NULL
                OR (affiliate_share_bps = 0 AND affiliate_fee_amount = 0)
            )
        );
    """)
    op.execute("CREATE INDEX idx_orders_user_created ON orders (user_id, created_at DESC);")
    op.execute("CREATE INDEX idx_orders_condition ON orders (condition_id, token_id);")
    op.execute("CREATE INDEX idx_orders_status ON orders (status);")
    op.execute("""
        CREATE TRIGGER trg_orders_updated_at
            BEFORE UPDATE ON orders
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE orders IS 'Orders accepted by the exchange, with the fee split computed at submission';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS orders CASCADE;")
