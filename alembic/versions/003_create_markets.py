"""003: create events / conditions / markets / outcomes tables

Revision ID: 003
Revises: 002
Create Date: 2026-02-20
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE events (
            id              TEXT            PRIMARY KEY DEFAULT gen_random_uuid()::text,
            slug            TEXT            NOT NULL,
            title           TEXT            NOT NULL,
            status          TEXT            NOT NULL DEFAULT 'active',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_events_slug UNIQUE (slug)
        );
    """)
    op.execute("""
        CREATE TABLE conditions (
            id                  TEXT            PRIMARY KEY,
            status              TEXT,
            outcome_slot_count  SMALLINT        NOT NULL DEFAULT 2,
            resolved            BOOLEAN         NOT NULL DEFAULT FALSE,
            snapshot_ts         TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_conditions_id_lower CHECK (id = LOWER(id))
        );
    """)
    op.execute("""
        CREATE TABLE markets (
            condition_id        TEXT            PRIMARY KEY REFERENCES conditions (id) ON DELETE CASCADE,
            event_id            TEXT            NOT NULL REFERENCES events (id) ON DELETE CASCADE,
            title               TEXT            NOT NULL,
            is_active           BOOLEAN         NOT NULL DEFAULT TRUE,
            is_resolved         BOOLEAN         NOT NULL DEFAULT FALSE,
            current_volume_24h  NUMERIC(20, 6)  NOT NULL DEFAULT 0,
            total_volume        NUMERIC(20, 6)  NOT NULL DEFAULT 0,
            last_snapshot_at    TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_markets_event_id ON markets (event_id);")
    op.execute("""
        CREATE TABLE outcomes (
            token_id            TEXT            PRIMARY KEY,
            condition_id        TEXT            NOT NULL REFERENCES conditions (id) ON DELETE CASCADE,
            outcome_index       SMALLINT        NOT NULL,
            outcome_text        TEXT            NOT NULL,
            best_bid_price      NUMERIC(20, 6),
            best_bid_size       NUMERIC(20, 6),
            best_ask_price      NUMERIC(20, 6),
            best_ask_size       NUMERIC(20, 6),
            open_interest       NUMERIC(20, 6),
            current_price       NUMERIC(20, 6),
            last_trade_price    NUMERIC(20, 6),
            last_trade_ts       TIMESTAMPTZ,
            volume_24h          NUMERIC(20, 6)  NOT NULL DEFAULT 0,
            total_volume        NUMERIC(20, 6)  NOT NULL DEFAULT 0,
            snapshot_ts         TIMESTAMPTZ,
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_outcomes_condition_index UNIQUE (condition_id, outcome_index)
        );
    """)
    for table in ("events", "conditions", "markets", "outcomes"):
        op.execute(f"""
            CREATE TRIGGER trg_{table}_updated_at
                BEFORE UPDATE ON {table}
                FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
        """)
    op.execute("COMMENT ON TABLE markets IS 'Local read store of exchange market snapshots';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS outcomes CASCADE;")
    op.execute("DROP TABLE IF EXISTS markets CASCADE;")
    op.execute("DROP TABLE IF EXISTS conditions CASCADE;")
    op.execute("DROP TABLE IF EXISTS events CASCADE;")
