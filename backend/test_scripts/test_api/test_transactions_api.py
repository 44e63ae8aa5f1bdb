"""
Transaction API Tests.

Tests for Transaction endpoints:
- POST /transactions: Post a credit or debit
- GET /transactions: List transactions (accountId filter, limit)
- GET /transactions/{id}: Get single transaction

Reference: backend/app/api/v1/transactions.py
"""
import httpx
import pytest
import pytest_asyncio

from backend.app.api.v1.dependencies import get_entity_store
from backend.app.config import get_settings
from backend.app.main import app
from backend.app.services.memory_store import InMemoryEntityStore

settings = get_settings()
API_BASE = settings.API_V1_PREFIX


# ============================================================================
# PYTEST FIXTURES
# ============================================================================

@pytest_asyncio.fixture
async def client():
    store = InMemoryEntityStore()
    app.dependency_overrides[get_entity_store] = lambda: store
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as client:
        yield client
    app.dependency_overrides.clear()


@pytest_asyncio.fixture
async def account_id(client) -> str:
    """Account opened with 50.00."""
    response = await client.post(f"{API_BASE}/accounts", json={"name": "Alice", "initialBalance": "50.00"})
    assert response.status_code == 201, f"Failed to create account: {response.text}"
    return response.json()["id"]


async def post_tx(client: httpx.AsyncClient, **body) -> httpx.Response:
    return await client.post(f"{API_BASE}/transactions", json=body)


async def balance_of(client: httpx.AsyncClient, account_id: str) -> str:
    return (await client.get(f"{API_BASE}/accounts/{account_id}")).json()["balance"]


# ============================================================================
# POST /transactions
# ============================================================================

class TestPostTransaction:

    @pytest.mark.asyncio
    async def test_credit_then_insufficient_debit(self, client, account_id):
        """TX-A-001: 50.00 + 25.50 = 75.50, then a 100.00 debit is refused."""
        response = await post_tx(client, accountId=account_id, type="credit", amount="25.50")
        assert response.status_code == 201
        tx = response.json()
        assert tx["accountId"] == account_id
        assert tx["type"] == "credit"
        assert tx["amount"] == "25.50"
        assert tx["description"] == "Funds added"
        assert await balance_of(client, account_id) == "75.50"

        response = await post_tx(client, accountId=account_id, type="debit", amount="100.00")
        assert response.status_code == 400
        assert response.json() == {
            "message": "Insufficient funds",
            "currentBalance": "75.50",
            "requestedAmount": "100.00",
            "code": "INSUFFICIENT_FUNDS",
            }

        assert await balance_of(client, account_id) == "75.50"
        listing = await client.get(f"{API_BASE}/transactions", params={"accountId": account_id})
        assert len(listing.json()) == 1

    @pytest.mark.asyncio
    async def test_exact_balance_debit(self, client, account_id):
        """TX-A-002: Spending everything leaves "0.00"."""
        response = await post_tx(client, accountId=account_id, type="debit", amount="50.00", description="Bike")
        assert response.status_code == 201
        assert response.json()["description"] == "Bike"
        assert await balance_of(client, account_id) == "0.00"

    @pytest.mark.asyncio
    async def test_numeric_amount(self, client, account_id):
        response = await post_tx(client, accountId=account_id, type="debit", amount=2.5)
        assert response.status_code == 201
        assert response.json()["amount"] == "2.50"
        assert response.json()["description"] == "Purchase"

    @pytest.mark.asyncio
    async def test_missing_account(self, client):
        """TX-A-003: Posting to an unknown account is 404."""
        response = await post_tx(client, accountId="missing", type="credit", amount="1.00")
        assert response.status_code == 404
        assert response.json()["code"] == "ACCOUNT_NOT_FOUND"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("amount", ["0", "-5", "abc", "100000000", "1e30"])
    async def test_invalid_amount(self, client, account_id, amount):
        """TX-A-004: Amount rules are reported per field."""
        response = await post_tx(client, accountId=account_id, type="credit", amount=amount)
        assert response.status_code == 400
        data = response.json()
        assert data["message"] == "Validation error"
        assert data["code"] == "INVALID_AMOUNT"
        assert data["errors"][0]["loc"] == ["amount"]
        assert await balance_of(client, account_id) == "50.00"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("body", [
        {"type": "credit", "amount": "1"},
        {"accountId": "x", "type": "refund", "amount": "1"},
        {"accountId": "x", "type": "credit"},
        {"accountId": "x", "type": "credit", "amount": True},
        ])
    async def test_malformed_body(self, client, body):
        response = await client.post(f"{API_BASE}/transactions", json=body)
        assert response.status_code == 400
        assert response.json()["message"] == "Validation error"


# ============================================================================
# GET /transactions
# ============================================================================

class TestListTransactions:

    @pytest.mark.asyncio
    async def test_filter_and_limit(self, client, account_id):
        """TX-A-010: Newest first, optional accountId filter and limit."""
        other = (await client.post(f"{API_BASE}/accounts", json={"name": "Bob"})).json()["id"]
        ids = []
        for amount in ("1.00", "2.00", "3.00"):
            ids.append((await post_tx(client, accountId=account_id, type="credit", amount=amount)).json()["id"])
        other_tx = (await post_tx(client, accountId=other, type="credit", amount="9.00")).json()["id"]

        everything = (await client.get(f"{API_BASE}/transactions")).json()
        assert [t["id"] for t in everything] == [other_tx] + ids[::-1]

        mine = (await client.get(f"{API_BASE}/transactions", params={"accountId": account_id})).json()
        assert [t["id"] for t in mine] == ids[::-1]

        limited = (await client.get(f"{API_BASE}/transactions", params={"accountId": account_id, "limit": 2})).json()
        assert [t["id"] for t in limited] == [ids[2], ids[1]]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [0, -1, settings.RECENT_TRANSACTIONS_LIMIT_MAX + 1])
    async def test_limit_out_of_range(self, client, limit):
        response = await client.get(f"{API_BASE}/transactions", params={"limit": limit})
        assert response.status_code == 400

    @pytest.mark.asyncio
    async def test_get_single(self, client, account_id):
        created = (await post_tx(client, accountId=account_id, type="credit", amount="4.00")).json()

        response = await client.get(f"{API_BASE}/transactions/{created['id']}")
        assert response.status_code == 200
        assert response.json() == created

    @pytest.mark.asyncio
    async def test_get_missing(self, client):
        response = await client.get(f"{API_BASE}/transactions/missing")
        assert response.status_code == 404
        assert response.json() == {"message": "Transaction not found", "code": "TRANSACTION_NOT_FOUND"}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
