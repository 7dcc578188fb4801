"""002: create entries table

Revision ID: 002
Revises: 001
Create Date: 2026-10-19
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE entries (
            id                  UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            account_id          UUID            NOT NULL REFERENCES accounts(id) ON DELETE CASCADE,
            created_date        DATE            NOT NULL,
            event_date          TEXT            NOT NULL,
            modality            TEXT            NOT NULL DEFAULT '',
            description         TEXT            NOT NULL DEFAULT '',
            market              TEXT            NOT NULL DEFAULT '',
            selection_text      TEXT            NOT NULL DEFAULT '',
            odd                 NUMERIC(12, 4)  NOT NULL,
            stake               NUMERIC(14, 2)  NOT NULL,
            result              VARCHAR(12)     NOT NULL,
            profit              NUMERIC(14, 2)  NOT NULL,
            timing              TEXT            NOT NULL DEFAULT 'PRE',
            site                VARCHAR(120)    NOT NULL DEFAULT '',
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_entries_odd_gte_1     CHECK (odd >= 1),
            CONSTRAINT ck_entries_stake_gte_0   CHECK (stake >= 0),
            CONSTRAINT ck_entries_result        CHECK (result IN (
                'WIN', 'LOSS', 'HALF_WIN', 'HALF_LOSS', 'CASH_OUT', 'VOID', 'PENDING'
            ))
        );
    """)
    op.execute("CREATE INDEX idx_entries_account_id ON entries (account_id);")
    op.execute("CREATE INDEX idx_entries_created ON entries (created_at, id);")
    op.execute(
        "COMMENT ON TABLE entries IS "
        "'Wagers. Multi-leg fields are pipe-joined, one segment per leg';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS entries CASCADE;")
