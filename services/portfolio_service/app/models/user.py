from __future__ import annotations

from sqlalchemy.orm import Mapped, relationship

from ..db.base import TimestampedModel


class User(TimestampedModel):
    """Identity anchor wallets attach to; carries no fields of its own yet."""

    __tablename__ = "users"

    wallets: Mapped[list["Wallet"]] = relationship(  # noqa: F821
        back_populates="user",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
