"""Create users, roles, permissions, orders, transactions and revoked_tokens

Revision ID: 001
Revises: None
Create Date: 2026-10-17 00:00:00.000000+00:00

Ids and timestamps are generated by the application, so no server defaults
are declared for them. Generic types (sa.Uuid, DateTime(timezone=True)) keep
the migration usable on PostgreSQL and SQLite alike.

Rollback: downgrade() drops every table (destructive).
"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _record_columns() -> list:
    return [
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        *_record_columns(),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("password_hash", sa.String(100), nullable=False,
                  comment="bcrypt digest; the plaintext is never stored"),
        sa.Column("first_name", sa.String(50), nullable=True),
        sa.Column("last_name", sa.String(50), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "roles",
        *_record_columns(),
        sa.Column("role_id", sa.String(100), nullable=False),
        sa.Column("manager", sa.Boolean(), nullable=False),
        sa.Column("casher", sa.Boolean(), nullable=False),
        sa.Column("guess_user", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("role_id"),
    )

    op.create_table(
        "permissions",
        *_record_columns(),
        sa.Column("token_id", sa.String(100), nullable=False),
        sa.Column("manager", sa.Boolean(), nullable=False),
        sa.Column("casher", sa.Boolean(), nullable=False),
        sa.Column("guess_user", sa.Boolean(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("token_id"),
    )

    op.create_table(
        "orders",
        *_record_columns(),
        sa.Column("order_id", sa.Integer(), nullable=False),
        sa.Column("order_name", sa.String(100), nullable=False),
        sa.Column("number_of_items", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("order_id"),
    )

    # product_id, inventory_id and order_id are free-form references: no foreign keys.
    op.create_table(
        "transactions",
        *_record_columns(),
        sa.Column("transaction_id", sa.String(100), nullable=False),
        sa.Column("product_id", sa.String(100), nullable=False),
        sa.Column("inventory_id", sa.String(100), nullable=False),
        sa.Column("order_id", sa.String(100), nullable=False),
        sa.Column("transaction_type", sa.String(20), nullable=False,
                  comment="purchase | sale"),
        sa.Column("transaction_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("quantity", sa.Integer(), nullable=False),
        sa.Column("payment", sa.Float(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("transaction_id"),
    )

    op.create_table(
        "revoked_tokens",
        sa.Column("jti", sa.String(64), nullable=False),
        sa.Column("subject_id", sa.String(64), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("jti"),
    )
    op.create_index("ix_revoked_tokens_subject_id", "revoked_tokens", ["subject_id"])


def downgrade() -> None:
    op.drop_index("ix_revoked_tokens_subject_id", table_name="revoked_tokens")
    op.drop_table("revoked_tokens")
    op.drop_table("transactions")
    op.drop_table("orders")
    op.drop_table("permissions")
    op.drop_table("roles")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
