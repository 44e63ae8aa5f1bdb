"""initial schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-17

Creates users, accounts and transactions.
"""
from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = '001_initial'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create all tables."""
    conn = op.get_bind()

    print("🔧 Starting migration 001_initial...")
    print("=" * 60)

    # Users table (legacy)
    print("📦 Creating table: users...")
    conn.execute(sa.text("""CREATE TABLE users
                            (
                                id            VARCHAR NOT NULL PRIMARY KEY,
                                username      VARCHAR NOT NULL,
                                password_hash VARCHAR NOT NULL
                            )"""))
    print("  ✓ Table created")
    conn.execute(sa.text("CREATE UNIQUE INDEX ix_users_username ON users (username)"))
    print("  ✓ Index created")

    # Accounts table
    print("📦 Creating table: accounts...")
    conn.execute(sa.text("""CREATE TABLE accounts
                            (
                                id         VARCHAR        NOT NULL PRIMARY KEY,
                                name       VARCHAR        NOT NULL,
                                age        INTEGER,
                                balance    NUMERIC(10, 2) NOT NULL DEFAULT 0.00,
                                created_at DATETIME       NOT NULL,
                                CONSTRAINT ck_accounts_age_range CHECK (age IS NULL OR (age >= 1 AND age <= 18))
                            )"""))
    print("  ✓ Table created")

    # Transactions table
    print("📦 Creating table: transactions...")
    conn.execute(sa.text("""CREATE TABLE transactions
                            (
                                id          VARCHAR        NOT NULL PRIMARY KEY,
                                account_id  VARCHAR        NOT NULL,
                                type        VARCHAR(6)     NOT NULL,
                                amount      NUMERIC(10, 2) NOT NULL,
                                description TEXT           NOT NULL,
                                created_at  DATETIME       NOT NULL,
                                CONSTRAINT ck_transactions_type CHECK (type IN ('credit', 'debit')),
                                FOREIGN KEY (account_id) REFERENCES accounts (id) ON DELETE CASCADE
                            )"""))
    print("  ✓ Table created")
    conn.execute(sa.text("CREATE INDEX ix_transactions_account_id ON transactions (account_id)"))
    conn.execute(sa.text("CREATE INDEX ix_transactions_created_at ON transactions (created_at)"))
    conn.execute(sa.text(
        "CREATE INDEX idx_transactions_account_created ON transactions (account_id, created_at)"
        ))
    print("  ✓ Indexes created")

    print("=" * 60)
    print("✅ Migration 001_initial complete")


def downgrade() -> None:
    """Drop all tables."""
    op.drop_table("transactions")
    op.drop_table("accounts")
    op.drop_index("ix_users_username", table_name="users")
    op.drop_table("users")
