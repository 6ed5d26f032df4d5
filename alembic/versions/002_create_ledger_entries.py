"""002: create ledger_entries table

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
        CREATE TABLE ledger_entries (
            id                      BIGSERIAL       PRIMARY KEY,
            account_id              BIGINT          NOT NULL REFERENCES accounts (id),
            kind                    VARCHAR(30)     NOT NULL,
            amount                  NUMERIC(12, 2)  NOT NULL,
            description             VARCHAR(500)    NOT NULL,
            counterparty_username   VARCHAR(64),
            metadata                JSONB,
            created_at              TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_ledger_kind CHECK (
                kind IN (
                    'deposit', 'withdraw',
                    'transfer_out', 'transfer_in',
                    'service', 'mobile_recharge',
                    'game'
                )
            ),
            CONSTRAINT ck_ledger_counterparty CHECK (
                (kind IN ('transfer_out', 'transfer_in')) = (counterparty_username IS NOT NULL)
            )
        );
    """)
    op.execute("CREATE INDEX idx_ledger_account_time ON ledger_entries (account_id, created_at DESC, id DESC);")
    op.execute("COMMENT ON TABLE ledger_entries IS 'Balance ledger: append-only, never updated or deleted';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS ledger_entries CASCADE;")
