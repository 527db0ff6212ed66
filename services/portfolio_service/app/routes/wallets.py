from __future__ import annotations

from fastapi import APIRouter, Response, status

from ..dependencies import ProvisioningDep, QueryServiceDep
from ..schemas import AddressCreate, AddressResponse, CreateWalletRequest, WalletDataResponse

router = APIRouter()


@router.post("", response_model=WalletDataResponse, status_code=status.HTTP_201_CREATED)
async def create_wallet(payload: CreateWalletRequest, provisioning: ProvisioningDep) -> WalletDataResponse:
    return await provisioning.create_wallet(payload)


@router.get("/by-stake-key/{stake_key}", response_model=WalletDataResponse)
async def get_wallet_by_stake_key(stake_key: str, query: QueryServiceDep) -> WalletDataResponse:
    return await query.get_wallet_by_stake_key(stake_key)


@router.get("/{wallet_id}", response_model=WalletDataResponse)
async def get_wallet_data(wallet_id: int, query: QueryServiceDep) -> WalletDataResponse:
    return await query.get_wallet_data(wallet_id)


@router.delete("/{wallet_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_wallet(wallet_id: int, provisioning: ProvisioningDep) -> Response:
    await provisioning.delete_wallet(wallet_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/{wallet_id}/addresses", response_model=AddressResponse, status_code=status.HTTP_201_CREATED)
async def add_address(wallet_id: int, payload: AddressCreate, provisioning: ProvisioningDep) -> AddressResponse:
    record = await provisioning.add_address(wallet_id, payload.address)
    return AddressResponse.model_validate(record)


@router.get("/{wallet_id}/addresses", response_model=list[AddressResponse])
async def list_addresses(wallet_id: int, provisioning: ProvisioningDep) -> list[AddressResponse]:
    records = await provisioning.list_addresses(wallet_id)
    return [AddressResponse.model_validate(record) for record in records]
