from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import delete, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..errors import ForeignKeyViolation, NotFoundError, PortfolioError, StorageError
from ..models import Address, User, Wallet

_FOREIGN_KEY_SQLSTATE = "23503"


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    orig = exc.orig
    # asyncpg and psycopg expose the SQLSTATE, SQLite only a message
    if _FOREIGN_KEY_SQLSTATE in (getattr(orig, "sqlstate", None), getattr(orig, "pgcode", None)):
        return True
    return "foreign key" in str(orig).lower()


class WalletRecordStore:
    """CRUD over users, wallets and addresses for a single request session.

    Parent existence is checked before inserting a child, and a foreign key
    ``IntegrityError`` raised at commit (parent deleted concurrently) is mapped
    to the same ``ForeignKeyViolation``. Other integrity failures such as NOT
    NULL violations are storage faults. Deletes run as one explicit
    transaction (addresses, wallets, then the owner) so cascade semantics do
    not depend on the engine enforcing ``ON DELETE CASCADE``. Any other
    SQLAlchemy failure surfaces as ``StorageError``.
    """

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @asynccontextmanager
    async def _write(self, integrity_error: PortfolioError | None = None) -> AsyncIterator[None]:
        try:
            yield
            await self.session.commit()
        except PortfolioError:
            await self.session.rollback()
            raise
        except IntegrityError as exc:
            await self.session.rollback()
            if integrity_error is not None and _is_foreign_key_violation(exc):
                raise integrity_error from exc
            raise StorageError() from exc
        except SQLAlchemyError as exc:
            await self.session.rollback()
            raise StorageError() from exc

    async def _refresh(self, instance) -> None:
        try:
            await self.session.refresh(instance)
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    async def _get(self, model, key: int):
        try:
            return await self.session.get(model, key)
        except SQLAlchemyError as exc:
            raise StorageError() from exc

    async def create_user(self) -> User:
        user = User()
        async with self._write():
            self.session.add(user)
        await self._refresh(user)
        return user

    async def create_wallet(self, user_id: int, stake_key: str, wallet_type: str) -> Wallet:
        violation = ForeignKeyViolation("wallet", "user", user_id)
        wallet = Wallet(user_id=user_id, stake_key=stake_key, wallet_type=wallet_type)
        async with self._write(integrity_error=violation):
            if await self.session.get(User, user_id) is None:
                raise violation
            self.session.add(wallet)
        await self._refresh(wallet)
        return wallet

    async def find_wallet_by_id(self, wallet_id: int) -> Wallet:
        wallet = await self._get(Wallet, wallet_id)
        if wallet is None:
            raise NotFoundError("wallet", wallet_id)
        return wallet

    async def find_wallet_by_stake_key(self, stake_key: str) -> Wallet:
        # Exact, case-sensitive match; the oldest wallet wins when a key is shared.
        stmt = select(Wallet).where(Wallet.stake_key == stake_key).order_by(Wallet.id).limit(1)
        try:
            wallet = await self.session.scalar(stmt)
        except SQLAlchemyError as exc:
            raise StorageError() from exc
        if wallet is None:
            raise NotFoundError("wallet", stake_key)
        return wallet

    async def add_address(self, wallet_id: int, address: str) -> Address:
        violation = ForeignKeyViolation("address", "wallet", wallet_id)
        record = Address(wallet_id=wallet_id, address=address)
        async with self._write(integrity_error=violation):
            if await self.session.get(Wallet, wallet_id) is None:
                raise violation
            self.session.add(record)
        await self._refresh(record)
        return record

    async def list_addresses(self, wallet_id: int) -> list[Address]:
        await self.find_wallet_by_id(wallet_id)
        try:
            result = await self.session.scalars(
                select(Address).where(Address.wallet_id == wallet_id).order_by(Address.id)
            )
        except SQLAlchemyError as exc:
            raise StorageError() from exc
        return list(result)

    async def delete_wallet(self, wallet_id: int) -> None:
        async with self._write():
            if await self.session.get(Wallet, wallet_id) is None:
                raise NotFoundError("wallet", wallet_id)
            await self.session.execute(
                delete(Address)
                .where(Address.wallet_id == wallet_id)
                .execution_options(synchronize_session=False)
            )
            await self.session.execute(
                delete(Wallet).where(Wallet.id == wallet_id).execution_options(synchronize_session=False)
            )
        self.session.expunge_all()

    async def delete_user(self, user_id: int) -> None:
        async with self._write():
            if await self.session.get(User, user_id) is None:
                raise NotFoundError("user", user_id)
            owned_wallets = select(Wallet.id).where(Wallet.user_id == user_id)
            await self.session.execute(
                delete(Address)
                .where(Address.wallet_id.in_(owned_wallets))
                .execution_options(synchronize_session=False)
            )
            await self.session.execute(
                delete(Wallet).where(Wallet.user_id == user_id).execution_options(synchronize_session=False)
            )
            await self.session.execute(
                delete(User).where(User.id == user_id).execution_options(synchronize_session=False)
            )
        self.session.expunge_all()
