"""002: create users table

Revision ID: 002
Revises: 001
Create Date: 2026-02-20
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE users (
            id                    TEXT            PRIMARY KEY DEFAULT gen_random_uuid()::text,
            address               VARCHAR(42)     NOT NULL,
            username              VARCHAR(64),
            referred_by_user_id   TEXT            REFERENCES users (id) ON DELETE SET NULL,
            is_admin              BOOLEAN         NOT NULL DEFAULT FALSE,
            is_active             BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at            TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at            TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_address     UNIQUE (address),
            CONSTRAINT uq_users_username    UNIQUE (username),
            CONSTRAINT ck_users_not_self_referred CHECK (referred_by_user_id <> id)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)
    op.execute("COMMENT ON TABLE users IS 'Wallet users; referred_by_user_id links to the referring affiliate';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
