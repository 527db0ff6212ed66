"""create addresses table

Revision ID: portfolio_20251031_0003
Revises: portfolio_20251031_0002
Create Date: 2025-10-31 12:40:36

"""
from __future__ import annotations

from alembic import op
import sqlalchemy as sa

revision = "portfolio_20251031_0003"
down_revision = "portfolio_20251031_0002"
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "addresses",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column(
            "wallet_id",
            sa.Integer(),
            sa.ForeignKey("wallets.id", name="fk_address_wallet", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("address", sa.String(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_addresses_wallet_id", "addresses", ["wallet_id"])


def downgrade() -> None:
    op.drop_index("ix_addresses_wallet_id", table_name="addresses")
    op.drop_table("addresses")
