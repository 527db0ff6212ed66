from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from .clients import AccountInfoClient
from .db.session import async_session_factory
from .services import UserProvisioningService, WalletQueryService, WalletRecordStore


async def get_session() -> AsyncGenerator[AsyncSession, None]:
    async with async_session_factory() as session:
        yield session


def get_account_info_client(request: Request) -> AccountInfoClient:
    # Created once in the lifespan hook so the connection pool is shared.
    return request.app.state.account_info_client


SessionDep = Annotated[AsyncSession, Depends(get_session)]
AccountClientDep = Annotated[AccountInfoClient, Depends(get_account_info_client)]


def get_record_store(session: SessionDep) -> WalletRecordStore:
    return WalletRecordStore(session)


StoreDep = Annotated[WalletRecordStore, Depends(get_record_store)]


def get_query_service(store: StoreDep, account_client: AccountClientDep) -> WalletQueryService:
    return WalletQueryService(store, account_client)


def get_provisioning_service(store: StoreDep) -> UserProvisioningService:
    return UserProvisioningService(store)


QueryServiceDep = Annotated[WalletQueryService, Depends(get_query_service)]
ProvisioningDep = Annotated[UserProvisioningService, Depends(get_provisioning_service)]
