from __future__ import annotations

from sqlalchemy import ForeignKey, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from ..db.base import TimestampedModel


class Address(TimestampedModel):
    __tablename__ = "addresses"

    wallet_id: Mapped[int] = mapped_column(ForeignKey("wallets.id", ondelete="CASCADE"), index=True, nullable=False)
    address: Mapped[str] = mapped_column(String(), nullable=False)

    wallet: Mapped["Wallet"] = relationship(back_populates="addresses")  # noqa: F821
