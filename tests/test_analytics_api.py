from datetime import datetime, timezone

from conftest import auth_header, category_id

from finance_tracker.core.exceptions import StoreUnavailable


def test_analytics_for_current_month(client, store, user, other_user):
    now = datetime.now(timezone.utc).replace(microsecond=0)
    headers = auth_header(user)
    for payload in (
        {"category_id": category_id(store, "Salary"), "amount": "1000", "type": "income"},
        {"category_id": category_id(store, "Shopping"), "amount": "150", "type": "expense"},
        {"category_id": category_id(store, "Utilities"), "amount": "50", "type": "expense"},
    ):
        payload.update({"description": "entry", "date": now.isoformat()})
        assert client.post("/api/transactions", json=payload, headers=headers).status_code == 201

    # someone else's spending never leaks into this user's figures
    client.post(
        "/api/transactions",
        json={
            "category_id": category_id(store, "Shopping"),
            "amount": "999",
            "type": "expense",
            "description": "not mine",
            "date": now.isoformat(),
        },
        headers=auth_header(other_user),
    )

    response = client.get("/api/analytics", headers=headers)
    assert response.status_code == 200
    body = response.json()
    assert body["total_balance"] == 800.0
    assert body["monthly_income"] == 1000.0
    assert body["monthly_expenses"] == 200.0
    assert body["savings_rate"] == 80.0
    assert body["income_change"] == 0
    assert body["category_breakdown"] == [
        {"category": "Shopping", "amount": 150.0, "percentage": 75.0},
        {"category": "Utilities", "amount": 50.0, "percentage": 25.0},
    ]
    assert len(body["monthly_trends"]) == 6
    assert body["monthly_trends"][-1]["income"] == 1000.0


def test_analytics_requires_authentication(client):
    assert client.get("/api/analytics").status_code == 401


def test_store_failure_surfaces_as_503(client, store, user, monkeypatch):
    def broken(user_id):
        raise StoreUnavailable("Store unavailable during list_transactions")

    monkeypatch.setattr(store, "list_transactions", broken)
    response = client.get("/api/analytics", headers=auth_header(user))
    assert response.status_code == 503
    assert response.json() == {"detail": "Store unavailable during list_transactions"}


def test_health_endpoints(client):
    assert client.get("/api/health").json()["status"] == "healthy"
    status = client.get("/api/status").json()
    assert status["overall_status"] == "healthy"


def test_collection_routes_answer_without_trailing_slash(client, user):
    headers = auth_header(user)
    for url in ("/api/analytics", "/api/transactions", "/api/categories"):
        response = client.get(url, headers=headers, follow_redirects=False)
        assert response.status_code == 200, url
