"""001: create accounts table

Revision ID: 001
Revises: 
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE accounts (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            name                VARCHAR(120)    NOT NULL,
            balance             NUMERIC(14, 2)  NOT NULL DEFAULT 0,
            initial_balance     NUMERIC(14, 2)  NOT NULL DEFAULT 0,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_accounts_name_not_blank CHECK (length(trim(name)) > 0)
        );
    """)
    op.execute(
        "COMMENT ON TABLE accounts IS "
        "'Bankroll accounts. balance = initial_balance + SUM(entries.profit)';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
