from __future__ import annotations

from decimal import Decimal

import pytest


@pytest.fixture()
def wallet(client):
    resp = client.post("/api/wallets", json={"name": "Main", "initial_amount": "100"})
    assert resp.status_code == 201, resp.text
    return resp.json()


def _wallet_balance(client, wallet_id: int) -> Decimal:
    return Decimal(client.get(f"/api/wallets/{wallet_id}").json()["balance"])


def test_fixed_source_crud(client, wallet):
    resp = client.post(
        "/api/sources",
        json={
            "kind": "income",
            "wallet_id": wallet["id"],
            "name": "  Salary  ",
            "amount": "3000",
            "is_fixed": True,
            "cycle_day_of_month": 25,
            "cycle_period": "monthly",
        },
    )
    assert resp.status_code == 201, resp.text
    src = resp.json()
    assert src["name"] == "Salary"
    assert src["next_due_date"] is None
    assert src["entry_date"] is None
    # a fixed source books nothing at creation
    assert _wallet_balance(client, wallet["id"]) == Decimal("100")

    resp = client.patch(f"/api/sources/{src['id']}", json={"amount": "3200", "cycle_day_of_month": 28})
    assert resp.status_code == 200, resp.text
    assert Decimal(resp.json()["amount"]) == Decimal("3200")
    assert resp.json()["cycle_day_of_month"] == 28

    assert client.get(f"/api/sources/{src['id']}").status_code == 200
    assert client.delete(f"/api/sources/{src['id']}").status_code == 204
    resp = client.get(f"/api/sources/{src['id']}")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Source not found"


def test_spontaneous_income_books_immediately(client, wallet):
    resp = client.post(
        "/api/incomes",
        json={"wallet_id": wallet["id"], "name": "Gift", "amount": "50", "is_fixed": False},
    )
    assert resp.status_code == 201, resp.text
    src = resp.json()
    assert src["kind"] == "income"
    assert src["entry_date"] is not None
    assert _wallet_balance(client, wallet["id"]) == Decimal("150")

    txns = client.get("/api/transactions", params={"wallet_id": wallet["id"]}).json()
    assert len(txns) == 1
    assert txns[0]["title"] == "Income: Gift"
    assert txns[0]["description"] == "Spontaneous income for Gift"
    assert txns[0]["source_id"] == src["id"]


def test_spontaneous_expense_above_balance_is_rejected(client, wallet):
    resp = client.post(
        "/api/expenses",
        json={"wallet_id": wallet["id"], "name": "TV", "amount": "500", "is_fixed": False},
    )
    assert resp.status_code == 400
    assert resp.json()["detail"] == "Insufficient wallet balance"

    assert client.get("/api/expenses").json() == []
    assert client.get("/api/transactions").json() == []
    assert _wallet_balance(client, wallet["id"]) == Decimal("100")


def test_kind_aliases_and_filters(client, wallet):
    client.post(
        "/api/incomes",
        json={"wallet_id": wallet["id"], "name": "Salary", "amount": 10, "cycle_day_of_month": 1, "cycle_period": "monthly"},
    )
    client.post(
        "/api/expenses",
        json={"wallet_id": wallet["id"], "name": "Snack", "amount": 5, "is_fixed": False},
    )

    assert [s["name"] for s in client.get("/api/incomes").json()] == ["Salary"]
    assert [s["name"] for s in client.get("/api/expenses").json()] == ["Snack"]
    assert [s["name"] for s in client.get("/api/sources", params={"is_fixed": True}).json()] == ["Salary"]
    assert [s["name"] for s in client.get("/api/sources", params={"kind": "expense"}).json()] == ["Snack"]


@pytest.mark.parametrize(
    "body",
    [
        {"name": "x", "amount": 10, "is_fixed": True},
        {"name": "x", "amount": 10, "is_fixed": True, "cycle_day_of_month": 32, "cycle_period": "monthly"},
        {"name": "x", "amount": 10, "is_fixed": False, "cycle_day_of_month": 3},
        {"name": "x", "amount": 0, "is_fixed": True, "cycle_day_of_month": 1, "cycle_period": "monthly"},
        {"name": "   ", "amount": 10, "is_fixed": True, "cycle_day_of_month": 1, "cycle_period": "monthly"},
        {"name": "x", "amount": 10, "is_fixed": True, "cycle_day_of_month": 1, "cycle_period": "weekly"},
    ],
)
def test_malformed_source_rejected(client, wallet, body):
    resp = client.post("/api/incomes", json={"wallet_id": wallet["id"], **body})
    assert resp.status_code == 422


def test_unknown_wallet_is_404(client):
    resp = client.post(
        "/api/incomes",
        json={"wallet_id": 999, "name": "x", "amount": 1, "cycle_day_of_month": 1, "cycle_period": "monthly"},
    )
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Wallet not found"


def test_cannot_switch_between_fixed_and_spontaneous(client, wallet):
    src = client.post(
        "/api/incomes",
        json={"wallet_id": wallet["id"], "name": "Salary", "amount": 10, "cycle_day_of_month": 1, "cycle_period": "monthly"},
    ).json()

    resp = client.patch(f"/api/sources/{src['id']}", json={"is_fixed": False})
    assert resp.status_code == 400


def test_schedule_change_resets_next_due(client, wallet, db_session):
    from datetime import date

    from walletflow import models

    src = client.post(
        "/api/incomes",
        json={"wallet_id": wallet["id"], "name": "Salary", "amount": 10, "cycle_day_of_month": 1, "cycle_period": "monthly"},
    ).json()
    row = db_session.get(models.FinancialSource, src["id"])
    row.next_due_date = date(2026, 5, 1)
    db_session.commit()

    resp = client.patch(f"/api/sources/{src['id']}", json={"cycle_period": "quarterly"})
    assert resp.status_code == 200, resp.text
    assert resp.json()["next_due_date"] is None

    resp = client.patch(f"/api/sources/{src['id']}", json={"name": "Pay"})
    assert resp.json()["name"] == "Pay"


@pytest.mark.parametrize("field", ["amount", "name"])
def test_explicit_null_on_required_field_is_rejected(client, wallet, field):
    src = client.post(
        "/api/incomes",
        json={"wallet_id": wallet["id"], "name": "Salary", "amount": 10, "cycle_day_of_month": 1, "cycle_period": "monthly"},
    ).json()

    resp = client.patch(f"/api/sources/{src['id']}", json={field: None, "cycle_day_of_month": 2})
    assert resp.status_code == 400

    row = client.get(f"/api/sources/{src['id']}").json()
    assert row["name"] == "Salary"
    assert Decimal(row["amount"]) == Decimal("10")
    assert row["cycle_day_of_month"] == 1


def test_null_is_fixed_is_ignored(client, wallet):
    src = client.post(
        "/api/incomes",
        json={"wallet_id": wallet["id"], "name": "Salary", "amount": 10, "cycle_day_of_month": 1, "cycle_period": "monthly"},
    ).json()

    resp = client.patch(f"/api/sources/{src['id']}", json={"is_fixed": None, "amount": "12"})
    assert resp.status_code == 200, resp.text
    assert resp.json()["is_fixed"] is True
    assert Decimal(resp.json()["amount"]) == Decimal("12")
