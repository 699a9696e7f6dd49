"""Create accounts and contacts tables.

Revision ID: 0001
Revises:
Create Date: 2026-10-19 00:00:00
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "accounts",
        sa.Column("id", sa.String(32), primary_key=True, comment="Unique account ID"),
        sa.Column(
            "phone_number", sa.String(16), nullable=False, comment="E.164-like phone number"
        ),
        sa.Column(
            "passcode_hash",
            sa.String(60),
            nullable=False,
            comment="bcrypt hash of the 6-digit passcode",
        ),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("contact_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.CheckConstraint(
            "contact_count >= 0 AND contact_count <= 5", name="ck_accounts_contact_count"
        ),
    )
    op.create_index("ix_accounts_phone_number", "accounts", ["phone_number"], unique=True)

    op.create_table(
        "contacts",
        sa.Column("id", sa.String(32), primary_key=True, comment="Unique contact ID"),
        sa.Column(
            "account_id",
            sa.String(32),
            sa.ForeignKey("accounts.id", ondelete="CASCADE"),
            nullable=False,
            comment="Owning account ID",
        ),
        sa.Column("name", sa.String(50), nullable=False, comment="Contact display name"),
        sa.Column(
            "phone_number", sa.String(16), nullable=False, comment="Contact's phone number"
        ),
        sa.Column(
            "created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
        sa.Column(
            "updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()
        ),
    )
    op.create_index("ix_contacts_account_created", "contacts", ["account_id", "created_at"])


def downgrade() -> None:
    op.drop_index("ix_contacts_account_created", table_name="contacts")
    op.drop_table("contacts")
    op.drop_index("ix_accounts_phone_number", table_name="accounts")
    op.drop_table("accounts")
