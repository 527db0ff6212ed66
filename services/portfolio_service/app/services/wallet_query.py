from __future__ import annotations

from collections.abc import Awaitable

from loguru import logger

from ..clients import AccountInfoClient, AccountSnapshot
from ..errors import AccountLookupError, NotFoundError, UpstreamError, UpstreamUnavailable
from ..metrics import wallet_lookup_total
from ..models import Wallet
from ..schemas import WalletDataResponse
from .records import WalletRecordStore


def merge_wallet_snapshot(wallet: Wallet, snapshot: AccountSnapshot) -> WalletDataResponse:
    """Identity fields come from the stored wallet, account state from the snapshot."""
    return WalletDataResponse(
        id=wallet.id,
        stake_key=wallet.stake_key,
        wallet_type=wallet.wallet_type,
        active=snapshot.active,
        balance=snapshot.controlled_amount,
        rewards=snapshot.rewards_sum,
    )


class WalletQueryService:
    """Read path combining a persisted wallet with its live account snapshot.

    A lookup is terminal on the first failure: an unknown wallet raises
    ``NotFoundError`` without calling Blockfrost, and any ``UpstreamError`` or
    ``ParseError`` from the client becomes ``UpstreamUnavailable``. Balances are
    never guessed, so no zeroed or stale values are returned on failure.
    """

    def __init__(self, store: WalletRecordStore, account_client: AccountInfoClient) -> None:
        self.store = store
        self.account_client = account_client

    async def get_wallet_data(self, wallet_id: int) -> WalletDataResponse:
        wallet = await self._resolve(self.store.find_wallet_by_id(wallet_id))
        return await self._enrich(wallet)

    async def get_wallet_by_stake_key(self, stake_key: str) -> WalletDataResponse:
        wallet = await self._resolve(self.store.find_wallet_by_stake_key(stake_key))
        return await self._enrich(wallet)

    async def _resolve(self, lookup: Awaitable[Wallet]) -> Wallet:
        try:
            return await lookup
        except NotFoundError:
            wallet_lookup_total.labels(outcome="not_found").inc()
            raise

    async def _enrich(self, wallet: Wallet) -> WalletDataResponse:
        try:
            snapshot = await self.account_client.fetch(wallet.stake_key)
        except AccountLookupError as exc:
            wallet_lookup_total.labels(outcome="upstream_unavailable").inc()
            logger.bind(wallet_id=wallet.id, stake_key=wallet.stake_key).error(
                "wallet.lookup.upstream_failed kind={} status={} reason={}",
                exc.kind,
                exc.status_code if isinstance(exc, UpstreamError) else None,
                exc,
            )
            raise UpstreamUnavailable() from exc
        wallet_lookup_total.labels(outcome="success").inc()
        return merge_wallet_snapshot(wallet, snapshot)
