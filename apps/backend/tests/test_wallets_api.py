from __future__ import annotations

from decimal import Decimal


def test_wallet_crud(client):
    resp = client.post("/api/wallets", json={"name": "Checking", "initial_amount": "250.00", "is_default": True})
    assert resp.status_code == 201, resp.text
    wallet = resp.json()
    assert Decimal(wallet["balance"]) == Decimal("250")
    assert Decimal(wallet["initial_amount"]) == Decimal("250")
    assert wallet["is_default"] is True

    resp = client.get(f"/api/wallets/{wallet['id']}")
    assert resp.status_code == 200
    assert resp.json()["name"] == "Checking"

    resp = client.patch(f"/api/wallets/{wallet['id']}", json={"name": "Everyday"})
    assert resp.status_code == 200, resp.text
    assert resp.json()["name"] == "Everyday"

    assert client.delete(f"/api/wallets/{wallet['id']}").status_code == 204
    resp = client.get(f"/api/wallets/{wallet['id']}")
    assert resp.status_code == 404
    assert resp.json()["detail"] == "Wallet not found"
    assert client.get("/api/wallets").json() == []


def test_balance_cannot_be_patched(client):
    wallet = client.post("/api/wallets", json={"name": "Cash", "initial_amount": 10}).json()

    resp = client.patch(f"/api/wallets/{wallet['id']}", json={"balance": "99999"})
    assert resp.status_code == 200
    assert Decimal(resp.json()["balance"]) == Decimal("10")


def test_only_one_default_wallet(client):
    first = client.post("/api/wallets", json={"name": "A", "is_default": True}).json()
    second = client.post("/api/wallets", json={"name": "B", "is_default": True}).json()

    rows = client.get("/api/wallets").json()
    defaults = [w["id"] for w in rows if w["is_default"]]
    assert defaults == [second["id"]]
    # default wallet listed first
    assert rows[0]["id"] == second["id"]

    client.patch(f"/api/wallets/{first['id']}", json={"is_default": True})
    rows = client.get("/api/wallets").json()
    assert [w["id"] for w in rows if w["is_default"]] == [first["id"]]


def test_negative_initial_amount_rejected(client):
    resp = client.post("/api/wallets", json={"name": "Bad", "initial_amount": -1})
    assert resp.status_code == 422


def test_bulk_create(client):
    resp = client.post("/api/wallets/bulk", json=[{"name": "A"}, {"name": "B", "initial_amount": 5}])
    assert resp.status_code == 201, resp.text
    assert [w["name"] for w in resp.json()] == ["A", "B"]

    assert client.post("/api/wallets/bulk", json=[]).status_code == 400
