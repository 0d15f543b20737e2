"""CSV import endpoint tests."""

from decimal import Decimal

import pytest

RANGE = {"date_from": "2026-01-01", "date_to": "2026-12-31"}


@pytest.fixture
async def account(client):
    return (await client.post("/api/v1/accounts", json={"name": "Checking"})).json()


async def _import(client, account_id, content: bytes, filename="export.csv", **params):
    return await client.post(
        "/api/v1/transactions/import",
        params={"account_id": account_id, **params},
        files={"file": (filename, content, "text/csv")},
    )


@pytest.mark.asyncio
async def test_import_n_rows_inserts_n_transactions_on_chosen_account(client, account):
    other = (await client.post("/api/v1/accounts", json={"name": "Savings"})).json()
    csv_content = (
        "Date,Amount,Payee,Notes\n"
        "2026-06-01,-12.50,Bakery,croissants\n"
        "2026-06-02,2500.00,ACME Payroll,\n"
        "2026-06-02,-12.50,Bakery,\n"
    ).encode()

    response = await _import(client, account["id"], csv_content)
    assert response.status_code == 201
    assert response.json() == {"account_id": account["id"], "total_rows": 3, "imported_count": 3}

    listed = (await client.get("/api/v1/transactions", params=RANGE)).json()
    assert len(listed) == 3
    assert {t["account_id"] for t in listed} == {account["id"]}
    assert sorted(Decimal(t["amount"]) for t in listed) == [Decimal("-12.50"), Decimal("-12.50"), Decimal("2500.00")]

    other_listed = (await client.get("/api/v1/transactions", params={**RANGE, "account_id": other["id"]})).json()
    assert other_listed == []


@pytest.mark.asyncio
async def test_import_semicolon_file_with_explicit_columns(client, account):
    csv_content = (
        "Booked;Value;Counterparty\n"
        "15/06/2026;-1.234,56;Landlord\n"
    ).encode("latin-1")

    response = await _import(
        client,
        account["id"],
        csv_content,
        date_column="Booked",
        amount_column="Value",
        payee_column="Counterparty",
    )
    assert response.status_code == 201

    [txn] = (await client.get("/api/v1/transactions", params=RANGE)).json()
    assert txn["date"] == "2026-06-15"
    assert Decimal(txn["amount"]) == Decimal("-1234.56")
    assert txn["payee"] == "Landlord"


@pytest.mark.asyncio
async def test_import_with_bad_row_writes_nothing(client, account):
    csv_content = (
        "date,amount,payee\n"
        "2026-06-01,-1.00,Ok\n"
        "not-a-date,-2.00,Broken\n"
    ).encode()

    response = await _import(client, account["id"], csv_content)
    assert response.status_code == 422
    assert "Line 3" in response.json()["detail"]
    assert (await client.get("/api/v1/transactions", params=RANGE)).json() == []


@pytest.mark.asyncio
async def test_import_windows_1252_file(client, account):
    csv_content = "date;amount;payee\n01/06/2026;-12,50 €;Boulangerie – Centre\n".encode("cp1252")

    response = await _import(client, account["id"], csv_content)
    assert response.status_code == 201

    [txn] = (await client.get("/api/v1/transactions", params=RANGE)).json()
    assert Decimal(txn["amount"]) == Decimal("-12.50")
    assert txn["payee"] == "Boulangerie – Centre"


@pytest.mark.asyncio
async def test_import_rejects_amount_with_more_than_two_decimals(client, account):
    csv_content = b"date,amount,payee\n2026-06-01,-1.00,Ok\n2026-06-02,12.345,Odd\n"

    response = await _import(client, account["id"], csv_content)
    assert response.status_code == 422
    assert "Line 3" in response.json()["detail"]
    assert (await client.get("/api/v1/transactions", params=RANGE)).json() == []


@pytest.mark.asyncio
async def test_import_rejects_empty_file(client, account):
    response = await _import(client, account["id"], b"date,amount,payee\n")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_import_rejects_unsupported_extension(client, account):
    response = await _import(client, account["id"], b"whatever", filename="statement.pdf")
    assert response.status_code == 422


@pytest.mark.asyncio
async def test_import_into_foreign_account_is_forbidden(client, account, other_user, act_as):
    act_as(other_user)
    response = await _import(client, account["id"], b"date,amount,payee\n2026-06-01,-1.00,x\n")
    assert response.status_code == 403
