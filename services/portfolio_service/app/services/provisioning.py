from __future__ import annotations

from loguru import logger

from ..errors import ValidationError
from ..metrics import user_created_total, wallet_created_total
from ..models import Address
from ..schemas import CreateUserRequest, CreateWalletRequest, UserResponse, WalletDataResponse
from .records import WalletRecordStore


def _require(value: str | None, field: str) -> str:
    if value is None or not value.strip():
        raise ValidationError(field)
    return value


class UserProvisioningService:
    """Write paths: users, the wallets attached to them, and their addresses."""

    def __init__(self, store: WalletRecordStore) -> None:
        self.store = store

    async def create_user(self, _request: CreateUserRequest | None = None) -> UserResponse:
        user = await self.store.create_user()
        user_created_total.inc()
        logger.info("user.created id={}", user.id)
        return UserResponse.model_validate(user)

    async def create_wallet(self, request: CreateWalletRequest) -> WalletDataResponse:
        # Validated before the store is touched.
        stake_key = _require(request.stake_key, "stake_key")
        wallet_type = _require(request.wallet_type, "wallet_type")

        wallet = await self.store.create_wallet(request.user_id, stake_key, wallet_type)
        wallet_created_total.labels(wallet_type=wallet.wallet_type).inc()
        logger.bind(wallet_id=wallet.id, user_id=wallet.user_id).info("wallet.created type={}", wallet.wallet_type)
        # A new wallet has no confirmed snapshot yet; this is a provisional view.
        return WalletDataResponse(
            id=wallet.id,
            stake_key=wallet.stake_key,
            wallet_type=wallet.wallet_type,
            active=False,
            balance="0",
            rewards="0",
        )

    async def delete_user(self, user_id: int) -> None:
        await self.store.delete_user(user_id)
        logger.info("user.deleted id={}", user_id)

    async def delete_wallet(self, wallet_id: int) -> None:
        await self.store.delete_wallet(wallet_id)
        logger.info("wallet.deleted id={}", wallet_id)

    async def add_address(self, wallet_id: int, address: str) -> Address:
        return await self.store.add_address(wallet_id, _require(address, "address"))

    async def list_addresses(self, wallet_id: int) -> list[Address]:
        return await self.store.list_addresses(wallet_id)
