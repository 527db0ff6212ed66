from .user import CreateUserRequest, UserResponse
from .wallet import (
    AddressCreate,
    AddressResponse,
    CreateWalletRequest,
    WalletDataResponse,
)

__all__ = [
    "CreateUserRequest",
    "UserResponse",
    "AddressCreate",
    "AddressResponse",
    "CreateWalletRequest",
    "WalletDataResponse",
]
