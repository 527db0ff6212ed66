"""create users table

Revision ID: portfolio_20251031_0001
Revises:
Create Date: 2025-10-31 12:40:24

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "portfolio_20251031_0001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )


def downgrade() -> None:
    op.drop_table("users")
