"""Transfer Routes — HTTP contract for create / list / approve / reject.

Invariants:
    - POST returns 201 with the created transfer; status decided by the threshold
    - Domain errors map to their HTTP status with the structured error envelope
    - Pydantic rejects malformed bodies with 400 before the orchestrator is reached
    - Money travels as exact decimal strings
"""

from uuid import uuid4


async def _create(client, source, destination, amount):
    return await client.post(
        "/api/v1/transfers",
        json={
            "source_account_id": str(source.id),
            "destination_account_id": str(destination.id),
            "amount": amount,
        },
    )


async def test_create_small_transfer_returns_201_approved(client, make_account):
    a = await make_account("A", "1000.00")
    b = await make_account("B", "500.00")

    res = await _create(client, a, b, "200.00")

    assert res.status_code == 201
    body = res.json()
    assert body["status"] == "APPROVED"
    assert body["amount"] == "200.00"
    assert body["source_account_id"] == str(a.id)


async def test_create_large_transfer_then_approve(client, make_account):
    a = await make_account("A", "100000.00")
    b = await make_account("B", "0.00")

    created = await _create(client, a, b, "60000")
    assert created.status_code == 201
    assert created.json()["status"] == "PENDING"

    res = await client.patch(f"/api/v1/transfers/{created.json()['id']}/approve")

    assert res.status_code == 200
    assert res.json()["status"] == "APPROVED"
    balance = await client.get(f"/api/v1/accounts/{a.id}/balance")
    assert balance.json()["balance"] == "40000.00"


async def test_reject_pending_transfer(client, make_account):
    a = await make_account("A", "100000.00")
    b = await make_account("B", "0.00")
    created = await _create(client, a, b, "60000")

    res = await client.patch(f"/api/v1/transfers/{created.json()['id']}/reject")

    assert res.status_code == 200
    assert res.json()["status"] == "REJECTED"
    balance = await client.get(f"/api/v1/accounts/{b.id}/balance")
    assert balance.json()["balance"] == "0.00"


async def test_approving_terminal_transfer_returns_409(client, make_account):
    a = await make_account("A", "1000.00")
    b = await make_account("B", "0.00")
    created = await _create(client, a, b, "10")

    res = await client.patch(f"/api/v1/transfers/{created.json()['id']}/approve")

    assert res.status_code == 409
    error = res.json()["error"]
    assert error["code"] == "INVALID_STATE"
    assert error["context"]["details"] == {"current_status": "APPROVED"}


async def test_same_account_returns_400(client, make_account):
    a = await make_account("A", "1000.00")

    res = await _create(client, a, a, "10")

    assert res.status_code == 400
    assert res.json()["error"]["code"] == "VALIDATION_ERROR"


async def test_insufficient_funds_returns_422(client, make_account):
    a = await make_account("A", "50.00")
    b = await make_account("B", "0.00")

    res = await _create(client, a, b, "100")

    assert res.status_code == 422
    error = res.json()["error"]
    assert error["code"] == "INSUFFICIENT_FUNDS"
    assert error["context"]["account_id"] == str(a.id)
    assert error["context"]["details"]["current_balance"] == "50.00"


async def test_amount_with_three_decimals_returns_400(client, make_account):
    a = await make_account("A", "1000.00")
    b = await make_account("B", "0.00")

    res = await _create(client, a, b, "10.123")

    assert res.status_code == 400
    error = res.json()["error"]
    assert error["code"] == "VALIDATION_ERROR"
    assert any(d["field"].endswith("amount") for d in error["details"])


async def test_non_positive_amount_returns_400(client, make_account):
    a = await make_account("A", "1000.00")
    b = await make_account("B", "0.00")

    res = await _create(client, a, b, "0")

    assert res.status_code == 400


async def test_unknown_account_returns_404(client, make_account):
    a = await make_account("A", "1000.00")

    res = await client.post(
        "/api/v1/transfers",
        json={
            "source_account_id": str(a.id),
            "destination_account_id": str(uuid4()),
            "amount": "10",
        },
    )

    assert res.status_code == 404
    assert res.json()["error"]["code"] == "RESOURCE_NOT_FOUND"


async def test_approve_unknown_transfer_returns_404(client):
    res = await client.patch(f"/api/v1/transfers/{uuid4()}/approve")
    assert res.status_code == 404


async def test_list_requires_account_id(client):
    res = await client.get("/api/v1/transfers")
    assert res.status_code == 400


async def test_list_returns_sent_and_received_with_parties(client, make_account):
    alice = await make_account("Alice", "1000.00")
    bob = await make_account("Bob", "1000.00")
    await _create(client, alice, bob, "10")
    await _create(client, bob, alice, "20")

    res = await client.get("/api/v1/transfers", params={"account_id": str(alice.id)})

    assert res.status_code == 200
    body = res.json()
    assert body["account_id"] == str(alice.id)
    assert [t["amount"] for t in body["sent"]] == ["10.00"]
    assert [t["amount"] for t in body["received"]] == ["20.00"]
    assert body["sent"][0]["destination"] == {
        "id": str(bob.id), "name": "Bob", "email": bob.email,
    }


async def test_balance_of_unknown_account_returns_404(client):
    res = await client.get(f"/api/v1/accounts/{uuid4()}/balance")
    assert res.status_code == 404


async def test_balance_reports_version(client, make_account):
    a = await make_account("A", "1000.00")
    b = await make_account("B", "0.00")
    await _create(client, a, b, "1.50")

    res = await client.get(f"/api/v1/accounts/{a.id}/balance")

    assert res.json() == {
        "account_id": str(a.id), "balance": "998.50", "version": 1,
    }
