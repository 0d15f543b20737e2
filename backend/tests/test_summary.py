"""Summary analytics tests."""

from datetime import date, timedelta
from decimal import Decimal

import pytest

from finboard.services.summary_service import percentage_change

WINDOW = {"date_from": "2026-03-01", "date_to": "2026-03-10"}


async def _seed(client):
    account = (await client.post("/api/v1/accounts", json={"name": "Main"})).json()
    cats = {}
    for name in ("Rent", "Groceries", "Fun", "Transport"):
        cats[name] = (await client.post("/api/v1/categories", json={"name": name})).json()["id"]

    rows = [
        # previous window (2026-02-19 .. 2026-02-28)
        ("2026-02-20", "500.00", None),
        ("2026-02-25", "-100.00", "Rent"),
        # current window
        ("2026-03-01", "1000.00", None),
        ("2026-03-02", "-100.00", "Rent"),
        ("2026-03-03", "-50.00", "Groceries"),
        ("2026-03-03", "-30.00", "Fun"),
        ("2026-03-05", "-20.00", "Transport"),
        ("2026-03-05", "-10.00", None),
        # outside both windows
        ("2026-04-01", "-999.00", "Fun"),
    ]
    payload = [
        {
            "account_id": account["id"],
            "category_id": cats[cat] if cat else None,
            "date": day,
            "amount": amount,
            "payee": f"{cat or 'misc'} {day}",
        }
        for day, amount, cat in rows
    ]
    response = await client.post("/api/v1/transactions/bulk-create", json=payload)
    assert response.status_code == 201
    return account


@pytest.mark.asyncio
async def test_summary_totals_and_changes(client):
    await _seed(client)
    response = await client.get("/api/v1/summary", params=WINDOW)
    assert response.status_code == 200
    data = response.json()

    assert Decimal(data["income_amount"]) == Decimal("1000.00")
    assert Decimal(data["expenses_amount"]) == Decimal("210.00")
    assert Decimal(data["remaining_amount"]) == Decimal("790.00")
    assert data["income_change"] == pytest.approx(100.0)
    assert data["expenses_change"] == pytest.approx(110.0)
    assert data["remaining_change"] == pytest.approx(97.5)


@pytest.mark.asyncio
async def test_summary_top_categories_fold_into_other(client):
    await _seed(client)
    data = (await client.get("/api/v1/summary", params=WINDOW)).json()

    categories = [(c["name"], Decimal(c["value"])) for c in data["categories"]]
    assert categories == [
        ("Rent", Decimal("100.00")),
        ("Groceries", Decimal("50.00")),
        ("Fun", Decimal("30.00")),
        ("Other", Decimal("30.00")),
    ]


@pytest.mark.asyncio
async def test_summary_days_cover_every_day_of_the_window(client):
    await _seed(client)
    data = (await client.get("/api/v1/summary", params=WINDOW)).json()

    days = data["days"]
    assert [d["date"] for d in days] == [f"2026-03-{d:02d}" for d in range(1, 11)]
    by_day = {d["date"]: d for d in days}
    assert Decimal(by_day["2026-03-01"]["income"]) == Decimal("1000.00")
    assert Decimal(by_day["2026-03-03"]["expenses"]) == Decimal("80.00")
    assert Decimal(by_day["2026-03-04"]["income"]) == 0
    assert Decimal(by_day["2026-03-04"]["expenses"]) == 0


@pytest.mark.asyncio
async def test_summary_ignores_other_users_and_filters_account(client, other_user, act_as, user):
    account = await _seed(client)

    act_as(other_user)
    await _seed(client)
    second = (await client.post("/api/v1/accounts", json={"name": "Side"})).json()
    await client.post(
        "/api/v1/transactions",
        json={"account_id": second["id"], "date": "2026-03-02", "amount": "7.00", "payee": "Tip"},
    )

    act_as(user)
    data = (await client.get("/api/v1/summary", params=WINDOW)).json()
    assert Decimal(data["income_amount"]) == Decimal("1000.00")

    act_as(other_user)
    data = (await client.get("/api/v1/summary", params={**WINDOW, "account_id": second["id"]})).json()
    assert Decimal(data["income_amount"]) == Decimal("7.00")
    assert Decimal(data["expenses_amount"]) == 0
    assert data["categories"] == []
    assert account["id"] != second["id"]


@pytest.mark.asyncio
async def test_summary_defaults_to_last_30_days(client):
    data = (await client.get("/api/v1/summary")).json()
    today = date.today()
    assert data["date_to"] == today.isoformat()
    assert data["date_from"] == (today - timedelta(days=30)).isoformat()
    assert len(data["days"]) == 31
    assert data["income_change"] == 0
    assert data["categories"] == []


@pytest.mark.asyncio
async def test_summary_rejects_inverted_range(client):
    response = await client.get(
        "/api/v1/summary", params={"date_from": "2026-03-10", "date_to": "2026-03-01"}
    )
    assert response.status_code == 422


@pytest.mark.parametrize(
    "current,previous,expected",
    [
        (Decimal("0"), Decimal("0"), 0.0),
        (Decimal("50"), Decimal("0"), 100.0),
        (Decimal("150"), Decimal("100"), 50.0),
        (Decimal("50"), Decimal("100"), -50.0),
        (Decimal("-50"), Decimal("-100"), 50.0),
    ],
)
def test_percentage_change(current, previous, expected):
    assert percentage_change(current, previous) == pytest.approx(expected)
