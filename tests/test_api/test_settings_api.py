"""API tests for budget settings"""


def test_defaults(client):
    resp = client.get("/api/v1/settings/")
    assert resp.status_code == 200
    assert resp.json() == {"monthly_budget": None, "alert_threshold": 80}


def test_update_and_read_back(client):
    resp = client.put("/api/v1/settings/", json={"monthly_budget": "2500.5", "alert_threshold": 70})
    assert resp.status_code == 200
    assert resp.json() == {"monthly_budget": "2500.50", "alert_threshold": 70}
    assert client.get("/api/v1/settings/").json()["monthly_budget"] == "2500.50"


def test_empty_body_resets(client):
    client.put("/api/v1/settings/", json={"monthly_budget": 1000, "alert_threshold": 90})
    resp = client.put("/api/v1/settings/", json={})
    assert resp.json() == {"monthly_budget": None, "alert_threshold": 80}


def test_invalid_threshold(client):
    resp = client.put("/api/v1/settings/", json={"alert_threshold": 150})
    assert resp.status_code == 400
    assert "alert_threshold" in resp.json()["detail"]


def test_invalid_budget(client):
    assert client.put("/api/v1/settings/", json={"monthly_budget": "lots"}).status_code == 400
