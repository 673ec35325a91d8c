"""API tests for dashboard, calendar and simulator"""
import pytest


@pytest.fixture
def ids(client):
    rows = [
        {"name": "Netflix", "cost": "649", "first_payment_date": "2024-07-12",
         "category": "entertainment", "is_shared": True, "shared_with": 4},
        {"name": "Spotify", "cost": "119", "first_payment_date": "2025-01-05", "category": "entertainment"},
        {"name": "Notion", "cost": "960", "billing_cycle": "yearly",
         "first_payment_date": "2024-03-15", "category": "productivity"},
    ]
    out = {}
    for row in rows:
        resp = client.post("/api/v1/subscriptions/", json=row)
        assert resp.status_code == 201
        out[row["name"]] = resp.json()["id"]
    return out


def test_dashboard(client, ids):
    client.put("/api/v1/settings/", json={"monthly_budget": "400", "alert_threshold": 80})
    data = client.get("/api/v1/dashboard").json()
    assert data["total_monthly"] == "361.25"
    assert data["total_yearly"] == "4335.00"
    assert data["count"] == 3
    assert [u["name"] for u in data["upcoming"]] == ["Spotify", "Netflix", "Notion"]
    assert data["budget"]["percentage"] == "90.31"
    assert data["budget"]["near_limit"] is True


def test_dashboard_empty(client):
    data = client.get("/api/v1/dashboard").json()
    assert data["total_monthly"] == "0.00"
    assert data["upcoming"] == []


def test_calendar_defaults_to_current_month(client, ids):
    data = client.get("/api/v1/calendar").json()
    assert (data["year"], data["month"]) == (2025, 3)
    assert data["days"][0]["is_today"] is True


def test_calendar_explicit_month(client, ids):
    data = client.get("/api/v1/calendar", params={"year": 2025, "month": 2}).json()
    assert len(data["days"]) == 28
    renewing = {d["day"]: [s["name"] for s in d["subscriptions"]] for d in data["days"] if d["subscriptions"]}
    assert renewing == {5: ["Spotify"], 12: ["Netflix"]}


def test_calendar_rejects_bad_month(client):
    assert client.get("/api/v1/calendar", params={"month": 13}).status_code == 422


def test_simulator(client, ids):
    body = {
        "removed": [ids["Notion"]],
        "split_override": {str(ids["Spotify"]): 2},
    }
    data = client.post("/api/v1/simulator", json=body).json()
    assert data["current_monthly"] == "361.25"
    assert data["simulated_monthly"] == "221.75"
    assert data["savings"] == "139.50"
    assert data["session"]["removed"] == [ids["Notion"]]
    assert data["session"]["split_override"] == {str(ids["Spotify"]): 2}


def test_simulator_cost_override(client, ids):
    body = {"cost_override": {str(ids["Spotify"]): "59"}}
    data = client.post("/api/v1/simulator", json=body).json()
    assert data["savings"] == "60.00"


def test_simulator_rejects_split_out_of_range(client, ids):
    body = {"split_override": {str(ids["Spotify"]): 11}}
    assert client.post("/api/v1/simulator", json=body).status_code == 422


def test_simulator_empty_body(client, ids):
    data = client.post("/api/v1/simulator", json={}).json()
    assert data["savings"] == "0.00"
