"""003: create goals table

Revision ID: 003
Revises: 002
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE goals (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            account_id          UUID            REFERENCES accounts(id) ON DELETE CASCADE,
            kind                VARCHAR(10)     NOT NULL,
            year                SMALLINT        NOT NULL,
            month               SMALLINT        NOT NULL DEFAULT 0,
            target              NUMERIC(14, 2)  NOT NULL,
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_goals_target_gt_0     CHECK (target > 0),
            CONSTRAINT ck_goals_year            CHECK (year BETWEEN 1900 AND 2200),
            CONSTRAINT ck_goals_kind_month      CHECK (
                (kind = 'ANNUAL' AND month = 0)
                OR (kind = 'MONTHLY' AND month BETWEEN 1 AND 12)
            )
        );
    """)
    # NULL account_id (combined goal) must still be unique per period
    op.execute("""
        CREATE UNIQUE INDEX uq_goals_period ON goals (
            (COALESCE(account_id, CAST('00000000-0000-0000-0000-000000000000' AS UUID))),
            year, month
        );
    """)
    op.execute("COMMENT ON TABLE goals IS 'Annual (month 0) and monthly profit targets';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS goals CASCADE;")
