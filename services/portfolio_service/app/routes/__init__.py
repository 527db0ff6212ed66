from fastapi import APIRouter, FastAPI

from . import system, users, wallets


def register_routes(app: FastAPI) -> None:
    router = APIRouter(prefix="/api/v1")
    router.include_router(system.router, tags=["system"])
    router.include_router(users.router, prefix="/users", tags=["users"])
    router.include_router(wallets.router, prefix="/wallets", tags=["wallets"])
    app.include_router(router)
