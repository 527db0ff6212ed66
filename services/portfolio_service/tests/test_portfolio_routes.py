from __future__ import annotations

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import func, select

from services.portfolio_service.app.main import create_app
from services.portfolio_service.app.models import Wallet

from .conftest import STAKE_KEY


async def _create_user(client) -> int:
    response = await client.post("/api/v1/users", json={})
    assert response.status_code == 201
    return response.json()["id"]


async def _create_wallet(client, user_id: int, stake_key: str = STAKE_KEY, wallet_type: str = "nami") -> dict:
    response = await client.post(
        "/api/v1/wallets",
        json={"user_id": user_id, "stake_key": stake_key, "wallet_type": wallet_type},
    )
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_user_then_wallet_returns_provisional_view(api_client, blockfrost):
    user_id = await _create_user(api_client)

    wallet = await _create_wallet(api_client, user_id)

    assert wallet == {
        "id": wallet["id"],
        "stake_key": STAKE_KEY,
        "active": False,
        "balance": "0",
        "rewards": "0",
        "wallet_type": "nami",
    }
    assert blockfrost.requests == []


@pytest.mark.asyncio
async def test_wallet_without_type_is_rejected(api_client, session):
    user_id = await _create_user(api_client)

    response = await api_client.post("/api/v1/wallets", json={"user_id": user_id, "stake_key": STAKE_KEY})

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "invalid_request"
    assert "wallet_type" in body["detail"]
    assert await session.scalar(select(func.count()).select_from(Wallet)) == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "payload",
    [
        {"stake_key": STAKE_KEY, "wallet_type": "nami"},
        {"user_id": "first", "stake_key": STAKE_KEY, "wallet_type": "nami"},
    ],
    ids=["missing-user-id", "non-integer-user-id"],
)
async def test_malformed_wallet_request_uses_error_envelope(api_client, session, payload):
    response = await api_client.post("/api/v1/wallets", json=payload, headers={"x-request-id": "req-422"})

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "invalid_request"
    assert "user_id" in body["detail"]
    assert body["request_id"] == "req-422"
    assert await session.scalar(select(func.count()).select_from(Wallet)) == 0


@pytest.mark.asyncio
async def test_wallet_for_unknown_user_conflicts(api_client, session):
    response = await api_client.post(
        "/api/v1/wallets",
        json={"user_id": 404, "stake_key": STAKE_KEY, "wallet_type": "nami"},
    )

    assert response.status_code == 409
    assert response.json()["error"] == "conflict"
    assert await session.scalar(select(func.count()).select_from(Wallet)) == 0


@pytest.mark.asyncio
async def test_get_wallet_data_merges_live_account_state(api_client, blockfrost):
    user_id = await _create_user(api_client)
    wallet = await _create_wallet(api_client, user_id, wallet_type="eternl")
    blockfrost.account(active=True, controlled_amount="90071992547409931234", rewards_sum="5000001")

    response = await api_client.get(f"/api/v1/wallets/{wallet['id']}")

    assert response.status_code == 200
    assert response.json() == {
        "id": wallet["id"],
        "stake_key": STAKE_KEY,
        "active": True,
        "balance": "90071992547409931234",
        "rewards": "5000001",
        "wallet_type": "eternl",
    }
    assert "x-request-id" in response.headers


@pytest.mark.asyncio
async def test_get_wallet_by_stake_key(api_client, blockfrost):
    user_id = await _create_user(api_client)
    wallet = await _create_wallet(api_client, user_id)

    response = await api_client.get(f"/api/v1/wallets/by-stake-key/{STAKE_KEY}")

    assert response.status_code == 200
    assert response.json()["id"] == wallet["id"]
    assert response.json()["balance"] == "1500000"


@pytest.mark.asyncio
async def test_unknown_wallet_is_404_without_upstream_call(api_client, blockfrost):
    response = await api_client.get("/api/v1/wallets/9999")

    assert response.status_code == 404
    assert response.json()["error"] == "not_found"
    assert blockfrost.requests == []


@pytest.mark.asyncio
@pytest.mark.parametrize("status, content", [(403, None), (200, b"{\"active\": true}")])
async def test_upstream_failure_is_502_without_balances(api_client, blockfrost, status, content):
    user_id = await _create_user(api_client)
    wallet = await _create_wallet(api_client, user_id)
    blockfrost.status = status
    blockfrost.body = {"error": "Forbidden"}
    blockfrost.content = content

    response = await api_client.get(f"/api/v1/wallets/{wallet['id']}")

    assert response.status_code == 502
    body = response.json()
    assert body["error"] == "upstream_unavailable"
    assert "balance" not in body
    assert "rewards" not in body


@pytest.mark.asyncio
async def test_delete_user_cascades_through_api(api_client, blockfrost):
    user_id = await _create_user(api_client)
    wallet = await _create_wallet(api_client, user_id)
    address = await api_client.post(f"/api/v1/wallets/{wallet['id']}/addresses", json={"address": "addr1qxyz"})
    assert address.status_code == 201

    listed = await api_client.get(f"/api/v1/wallets/{wallet['id']}/addresses")
    assert [a["address"] for a in listed.json()] == ["addr1qxyz"]

    deleted = await api_client.delete(f"/api/v1/users/{user_id}")
    assert deleted.status_code == 204

    assert (await api_client.get(f"/api/v1/wallets/{wallet['id']}")).status_code == 404
    assert (await api_client.get(f"/api/v1/wallets/{wallet['id']}/addresses")).status_code == 404
    assert (await api_client.delete(f"/api/v1/users/{user_id}")).status_code == 404


@pytest.mark.asyncio
async def test_health_endpoint(api_client):
    response = await api_client.get("/api/v1/healthz")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "service": "portfolio-service"}


@pytest.mark.asyncio
async def test_unexpected_failure_is_reported_as_internal():
    app = create_app()

    async def _explode():
        raise RuntimeError("database password is hunter2")

    app.add_api_route("/api/v1/explode", _explode)
    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://testserver") as client:
        response = await client.get("/api/v1/explode")

    assert response.status_code == 500
    assert response.json()["error"] == "internal"
    assert response.json()["detail"] is None
