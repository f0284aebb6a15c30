"""Tests for the FastAPI endpoints."""

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from penguin.api.app import create_app, ensure_deployed
from penguin.config import get_settings
from penguin.ledger.database import close_db, init_db
from penguin.utils.locks import reset_ledger_lock

from conftest import MANAGER, OWNER, UNIT, USER1, USER2


@pytest_asyncio.fixture
async def test_app(tmp_path, monkeypatch):
    """Create test application with a fresh, deployed database."""
    monkeypatch.setenv("DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path}/api.db")
    monkeypatch.setenv("OWNER_ADDRESS", OWNER)
    monkeypatch.setenv("LIQUIDITY_MANAGER_ADDRESS", MANAGER)
    get_settings.cache_clear()
    await close_db()
    reset_ledger_lock()

    # ASGITransport does not run the lifespan, so do its startup here
    await init_db()
    await ensure_deployed()

    yield create_app()

    # Cleanup
    await close_db()
    get_settings.cache_clear()
    reset_ledger_lock()


@pytest_asyncio.fixture
async def client(test_app):
    """Create async test client."""
    transport = ASGITransport(app=test_app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


def as_caller(address: str) -> dict:
    return {"X-Caller": address}


class TestHealthEndpoints:
    """Tests for health check endpoints."""

    @pytest.mark.asyncio
    async def test_health_check(self, client):
        response = await client.get("/health")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["service"] == "penguin"

    @pytest.mark.asyncio
    async def test_detailed_health(self, client):
        response = await client.get("/health/detailed")

        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["ledger"]["deployed"] is True
        assert data["ledger"]["conserved"] is True
        assert data["config"]["environment"] == "test"


class TestTokenEndpoints:
    """Tests for token reads and transfers."""

    @pytest.mark.asyncio
    async def test_token_info(self, client):
        response = await client.get("/token")

        assert response.status_code == 200
        data = response.json()
        assert data["symbol"] == "PGN"
        assert data["decimals"] == 18
        assert data["total_supply"] == str(1_000_000_000 * UNIT)
        assert data["owner"] == OWNER
        assert data["liquidity_manager"] == MANAGER
        assert data["tax_rate_bps"] == 500

    @pytest.mark.asyncio
    async def test_owner_balance(self, client):
        response = await client.get(f"/accounts/{OWNER}/balance")

        assert response.status_code == 200
        assert response.json()["balance"] == str(1_000_000_000 * UNIT)

    @pytest.mark.asyncio
    async def test_unknown_account(self, client):
        response = await client.get(f"/accounts/{USER2}")

        assert response.status_code == 200
        data = response.json()
        assert data["balance"] == "0"
        assert data["is_fee_exempt"] is False
        assert data["trade_window"] == {"window_start": None, "trade_count": 0}

    @pytest.mark.asyncio
    async def test_transfer(self, client):
        response = await client.post(
            "/transfer",
            json={"to": USER1, "amount": 100 * UNIT},
            headers=as_caller(OWNER),
        )

        assert response.status_code == 200
        data = response.json()
        assert data["success"] is True
        assert data["net_amount"] == str(95 * UNIT)
        assert data["tax_amount"] == str(5 * UNIT)

        balance = await client.get(f"/accounts/{USER1}/balance")
        assert balance.json()["balance"] == str(95 * UNIT)
        manager = await client.get(f"/accounts/{MANAGER}")
        assert manager.json()["balance"] == str(5 * UNIT)
        assert manager.json()["is_fee_exempt"] is True

    @pytest.mark.asyncio
    async def test_transfer_opens_sender_window(self, client):
        await client.post(
            "/transfer", json={"to": USER1, "amount": UNIT}, headers=as_caller(OWNER)
        )

        response = await client.get(f"/accounts/{OWNER}")
        assert response.json()["trade_window"]["trade_count"] == 1

    @pytest.mark.asyncio
    async def test_transfer_requires_caller(self, client):
        response = await client.post("/transfer", json={"to": USER1, "amount": UNIT})

        assert response.status_code == 401

    @pytest.mark.asyncio
    async def test_insufficient_balance(self, client):
        response = await client.post(
            "/transfer", json={"to": USER2, "amount": UNIT}, headers=as_caller(USER1)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "insufficient_balance"

    @pytest.mark.asyncio
    async def test_zero_amount(self, client):
        response = await client.post(
            "/transfer", json={"to": USER2, "amount": 0}, headers=as_caller(OWNER)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_amount"

    @pytest.mark.asyncio
    async def test_amount_over_cap(self, client):
        response = await client.post(
            "/transfer",
            json={"to": USER1, "amount": 1_000_001 * UNIT},
            headers=as_caller(OWNER),
        )

        assert response.status_code == 400
        assert response.json()["error"] == "trade_amount_exceeded"


class TestAdminEndpoints:
    """Tests for the owner-gated endpoints."""

    @pytest.mark.asyncio
    async def test_get_config(self, client):
        response = await client.get("/admin/config")

        assert response.status_code == 200
        data = response.json()
        assert data["owner"] == OWNER
        assert data["daily_trade_limit"] == 10
        assert data["daily_max_trade_amount"] == str(1_000_000 * UNIT)

    @pytest.mark.asyncio
    async def test_non_owner_forbidden(self, client):
        response = await client.post(
            "/admin/tax-rate", json={"bps": 0}, headers=as_caller(USER1)
        )

        assert response.status_code == 403
        assert response.json()["error"] == "unauthorized"

        config = await client.get("/admin/config")
        assert config.json()["tax_rate_bps"] == 500

    @pytest.mark.asyncio
    async def test_set_tax_rate(self, client):
        response = await client.post(
            "/admin/tax-rate", json={"bps": 250}, headers=as_caller(OWNER)
        )

        assert response.status_code == 200
        assert response.json() == {"success": True, "operation": "set_tax_rate"}

        config = await client.get("/admin/config")
        assert config.json()["tax_rate_bps"] == 250

    @pytest.mark.asyncio
    async def test_invalid_tax_rate(self, client):
        response = await client.post(
            "/admin/tax-rate", json={"bps": 20000}, headers=as_caller(OWNER)
        )

        assert response.status_code == 400
        assert response.json()["error"] == "invalid_rate"

    @pytest.mark.asyncio
    async def test_trade_limit(self, client):
        response = await client.post(
            "/admin/trade-limit",
            json={"max_amount": 500 * UNIT, "max_count": 3},
            headers=as_caller(OWNER),
        )
        assert response.status_code == 200

        limits = await client.get("/admin/trade-limit")
        assert limits.json() == {
            "daily_max_trade_amount": str(500 * UNIT),
            "daily_trade_limit": 3,
        }

    @pytest.mark.asyncio
    async def test_fee_exemption(self, client):
        response = await client.post(
            "/admin/exclude-from-fee", json={"address": USER1}, headers=as_caller(OWNER)
        )
        assert response.status_code == 200

        check = await client.get(f"/admin/fee-exempt/{USER1}")
        assert check.json() == {"address": USER1, "excluded": True}

        # Exempt receiver: no tax
        transfer = await client.post(
            "/transfer", json={"to": USER1, "amount": 100 * UNIT}, headers=as_caller(OWNER)
        )
        assert transfer.json()["tax_amount"] == "0"

        await client.post(
            "/admin/include-in-fee", json={"address": USER1}, headers=as_caller(OWNER)
        )
        check = await client.get(f"/admin/fee-exempt/{USER1}")
        assert check.json()["excluded"] is False

    @pytest.mark.asyncio
    async def test_transfer_ownership(self, client):
        response = await client.post(
            "/admin/owner", json={"address": USER1}, headers=as_caller(OWNER)
        )
        assert response.status_code == 200

        forbidden = await client.post(
            "/admin/tax-rate", json={"bps": 0}, headers=as_caller(OWNER)
        )
        assert forbidden.status_code == 403

        allowed = await client.post(
            "/admin/tax-rate", json={"bps": 0}, headers=as_caller(USER1)
        )
        assert allowed.status_code == 200
