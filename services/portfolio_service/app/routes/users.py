from __future__ import annotations

from fastapi import APIRouter, Response, status

from ..dependencies import ProvisioningDep
from ..schemas import CreateUserRequest, UserResponse

router = APIRouter()


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(payload: CreateUserRequest, provisioning: ProvisioningDep) -> UserResponse:
    return await provisioning.create_user(payload)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(user_id: int, provisioning: ProvisioningDep) -> Response:
    """Delete a user together with all of its wallets and their addresses."""
    await provisioning.delete_user(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
