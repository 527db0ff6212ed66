"""create wallets table

Revision ID: portfolio_20251031_0002
Revises: portfolio_20251031_0001
Create Date: 2025-10-31 12:40:31

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "portfolio_20251031_0002"
down_revision = "portfolio_20251031_0001"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "wallets",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("users.id", name="fk_wallet_user", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("stake_key", sa.String(), nullable=False),
        sa.Column("wallet_type", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_wallets_user_id", "wallets", ["user_id"])
    op.create_index("ix_wallets_stake_key", "wallets", ["stake_key"])


def downgrade() -> None:
    op.drop_index("ix_wallets_stake_key", table_name="wallets")
    op.drop_index("ix_wallets_user_id", table_name="wallets")
    op.drop_table("wallets")
