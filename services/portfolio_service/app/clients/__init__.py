from .blockfrost import AccountInfoClient, AccountSnapshot

__all__ = ["AccountInfoClient", "AccountSnapshot"]
