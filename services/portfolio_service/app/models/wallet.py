from __future__ import annotations

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.base import TimestampedModel


class Wallet(TimestampedModel):
    __tablename__ = "wallets"

    user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    # Chain-level stake address used for Blockfrost lookups; stored verbatim
    stake_key: Mapped[str] = mapped_column(String(), index=True, nullable=False)
    wallet_type: Mapped[str] = mapped_column(String(), nullable=False)

    user: Mapped["User"] = relationship(back_populates="wallets")  # noqa: F821
    addresses: Mapped[list["Address"]] = relationship(  # noqa: F821
        back_populates="wallet",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
