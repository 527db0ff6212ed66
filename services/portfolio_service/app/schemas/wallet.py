from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class CreateWalletRequest(BaseModel):
    user_id: int
    stake_key: str | None = Field(None, description="Stake address used for account lookups")
    # Optional at the schema level so a missing value surfaces as a service
    # ValidationError rather than being defaulted.
    wallet_type: str | None = Field(None, description="Wallet kind, e.g. custodial or the browser wallet name")


class WalletDataResponse(BaseModel):
    """Wallet identity merged with its on-chain account state.

    ``balance`` and ``rewards`` are lovelace amounts as decimal strings.
    """

    id: int
    stake_key: str
    active: bool
    balance: str
    rewards: str
    wallet_type: str


class AddressCreate(BaseModel):
    address: str = Field(..., min_length=1)


class AddressResponse(BaseModel):
    id: int
    wallet_id: int
    address: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)
