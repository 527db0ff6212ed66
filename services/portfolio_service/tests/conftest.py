from __future__ import annotations

from dataclasses import dataclass, field

import httpx
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from services.portfolio_service.app import settings as portfolio_settings_module
from services.portfolio_service.app.clients import AccountInfoClient
from services.portfolio_service.app.db.base import Base
from services.portfolio_service.app.dependencies import get_account_info_client, get_session
from services.portfolio_service.app.main import create_app

BLOCKFROST_URL = "https://blockfrost.test/api/v0"
PROJECT_ID = "mainnetTestProject"
STAKE_KEY = "stake1uyehkck0lajq8gr28t9uxnuvgcqrc6070x3k9r8048z8y5gh6ffgw"


@dataclass
class FakeBlockfrost:
    """Scripted stand-in for the Blockfrost accounts endpoint."""

    status: int = 200
    body: dict | None = None
    content: bytes | None = None
    error: Exception | None = None
    requests: list[httpx.Request] = field(default_factory=list)

    def account(self, active: bool = True, controlled_amount: str = "1500000", rewards_sum: str = "42") -> None:
        self.status = 200
        self.content = None
        self.body = {
            "stake_address": STAKE_KEY,
            "active": active,
            "controlled_amount": controlled_amount,
            "rewards_sum": rewards_sum,
            "withdrawable_amount": "0",
            "pool_id": "pool1pu5jlj4q9w9jlxeu370a3c9myx47md5j5m2str0naunn2q3lkdy",
        }

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.error is not None:
            raise self.error
        if self.content is not None:
            return httpx.Response(self.status, content=self.content)
        return httpx.Response(self.status, json=self.body if self.body is not None else {})


@pytest_asyncio.fixture()
async def session_factory():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _record) -> None:  # pragma: no cover - driver hook
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, expire_on_commit=False, class_=AsyncSession)
    await engine.dispose()


@pytest_asyncio.fixture()
async def session(session_factory):
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture()
async def blockfrost():
    fake = FakeBlockfrost()
    fake.account()
    return fake


@pytest_asyncio.fixture()
async def account_client(blockfrost):
    http_client = httpx.AsyncClient(transport=httpx.MockTransport(blockfrost.handle))
    client = AccountInfoClient(BLOCKFROST_URL, PROJECT_ID, http_client=http_client)
    yield client
    await http_client.aclose()


@pytest_asyncio.fixture()
async def api_client(session_factory, account_client):
    portfolio_settings_module.portfolio_settings.cache_clear()

    async def _override_session() -> AsyncSession:
        session = session_factory()
        try:
            yield session
        finally:
            await session.close()

    app = create_app()
    app.dependency_overrides[get_session] = _override_session
    app.dependency_overrides[get_account_info_client] = lambda: account_client

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client

    portfolio_settings_module.portfolio_settings.cache_clear()
