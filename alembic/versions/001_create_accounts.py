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
            id                  BIGSERIAL       PRIMARY KEY,
            username            VARCHAR(64)     NOT NULL,
            credential_hash     VARCHAR(255)    NOT NULL,
            balance             NUMERIC(12, 2)  NOT NULL DEFAULT 0,
            login_attempts      INTEGER         NOT NULL DEFAULT 0,
            is_locked           BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_accounts_username             UNIQUE (username),
            CONSTRAINT ck_accounts_balance_gte_0        CHECK (balance >= 0),
            CONSTRAINT ck_accounts_login_attempts_gte_0 CHECK (login_attempts >= 0)
        );
    """)
    op.execute("COMMENT ON TABLE accounts IS 'Customer accounts: balance in dollars, two decimals';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS accounts CASCADE;")
