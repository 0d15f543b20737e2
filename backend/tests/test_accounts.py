"""Account CRUD tests."""

import pytest


async def _create(client, name):
    response = await client.post("/api/v1/accounts", json={"name": name})
    assert response.status_code == 201
    return response.json()


@pytest.mark.asyncio
async def test_create_account_returns_fields_and_id(client):
    data = await _create(client, "Checking")
    assert data["name"] == "Checking"
    assert isinstance(data["id"], int)

    response = await client.get(f"/api/v1/accounts/{data['id']}")
    assert response.status_code == 200
    assert response.json()["name"] == "Checking"


@pytest.mark.asyncio
async def test_create_account_rejects_empty_name(client):
    response = await client.post("/api/v1/accounts", json={"name": ""})
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_list_accounts_is_scoped_to_user(client, other_user, act_as, user):
    await _create(client, "Savings")
    await _create(client, "Checking")

    act_as(other_user)
    await _create(client, "Bob's wallet")

    act_as(user)
    response = await client.get("/api/v1/accounts")
    assert response.status_code == 200
    assert [a["name"] for a in response.json()] == ["Checking", "Savings"]


@pytest.mark.asyncio
async def test_update_account(client):
    account = await _create(client, "Old name")
    response = await client.patch(f"/api/v1/accounts/{account['id']}", json={"name": "New name"})
    assert response.status_code == 200
    assert response.json()["name"] == "New name"


@pytest.mark.asyncio
async def test_get_missing_account_is_404(client):
    response = await client.get("/api/v1/accounts/9999")
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_foreign_account_is_forbidden(client, other_user, act_as):
    account = await _create(client, "Mine")
    act_as(other_user)
    assert (await client.get(f"/api/v1/accounts/{account['id']}")).status_code == 403
    assert (await client.patch(f"/api/v1/accounts/{account['id']}", json={"name": "x"})).status_code == 403
    assert (await client.delete(f"/api/v1/accounts/{account['id']}")).status_code == 403


@pytest.mark.asyncio
async def test_delete_account_removes_its_transactions(client):
    account = await _create(client, "Closing")
    txn = await client.post(
        "/api/v1/transactions",
        json={"account_id": account["id"], "date": "2026-03-01", "amount": "-5.00", "payee": "Cafe"},
    )
    assert txn.status_code == 201

    response = await client.delete(f"/api/v1/accounts/{account['id']}")
    assert response.status_code == 204
    assert (await client.get(f"/api/v1/accounts/{account['id']}")).status_code == 404
    assert (await client.get(f"/api/v1/transactions/{txn.json()['id']}")).status_code == 404


@pytest.mark.asyncio
async def test_bulk_delete_removes_exactly_the_supplied_ids(client, other_user, act_as, user):
    a = await _create(client, "A")
    b = await _create(client, "B")
    c = await _create(client, "C")

    act_as(other_user)
    foreign = await _create(client, "Foreign")

    act_as(user)
    response = await client.post(
        "/api/v1/accounts/bulk-delete",
        json={"ids": [a["id"], c["id"], foreign["id"], 424242]},
    )
    assert response.status_code == 200
    assert response.json()["deleted_ids"] == sorted([a["id"], c["id"]])

    remaining = [acc["id"] for acc in (await client.get("/api/v1/accounts")).json()]
    assert remaining == [b["id"]]

    act_as(other_user)
    assert (await client.get(f"/api/v1/accounts/{foreign['id']}")).status_code == 200


@pytest.mark.asyncio
async def test_bulk_delete_requires_ids(client):
    response = await client.post("/api/v1/accounts/bulk-delete", json={"ids": []})
    assert response.status_code == 422
