"""Service-layer components for the portfolio service."""

from .provisioning import UserProvisioningService
from .records import WalletRecordStore
from .wallet_query import WalletQueryService, merge_wallet_snapshot

__all__ = [
    "UserProvisioningService",
    "WalletRecordStore",
    "WalletQueryService",
    "merge_wallet_snapshot",
]
