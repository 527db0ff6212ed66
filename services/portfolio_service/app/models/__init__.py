from .user import User
from .wallet import Wallet
from .address import Address

__all__ = [
    "User",
    "Wallet",
    "Address",
]
