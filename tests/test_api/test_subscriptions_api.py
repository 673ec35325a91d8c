"""
API tests for subscription CRUD.

FIXED_NOW in conftest pins the clock to 2025-03-01 09:30.
"""

NETFLIX = {
    "name": "Netflix",
    "cost": "649",
    "billing_cycle": "monthly",
    "first_payment_date": "2024-07-12",
    "category": "entertainment",
    "is_shared": True,
    "shared_with": 4,
}


def _create(client, **overrides):
    resp = client.post("/api/v1/subscriptions/", json={**NETFLIX, **overrides})
    assert resp.status_code == 201, resp.text
    return resp.json()


def test_create_subscription(client):
    data = _create(client)
    assert data["name"] == "Netflix"
    assert data["cost"] == "649.00"
    assert data["category_label"] == "Entertainment"
    assert data["monthly_cost"] == "649.00"
    assert data["payer_share"] == "162.25"
    assert data["next_renewal"] == "2025-03-12"
    assert data["days_until_renewal"] == 11


def test_create_yearly_normalizes_monthly_cost(client):
    data = _create(client, name="Notion", cost=960, billing_cycle="Yearly",
                   category="productivity", is_shared=False, shared_with=1,
                   first_payment_date="2024-03-01")
    assert data["billing_cycle"] == "yearly"
    assert data["monthly_cost"] == "80.00"
    # renewal on the reference date itself is due today
    assert data["next_renewal"] == "2025-03-01"
    assert data["days_until_renewal"] == 0


def test_create_defaults(client):
    resp = client.post("/api/v1/subscriptions/", json={"name": "Gym", "cost": 1500})
    assert resp.status_code == 201
    data = resp.json()
    assert data["billing_cycle"] == "monthly"
    assert data["category"] == "other"
    assert data["status"] == "active"
    assert data["next_renewal"] is None
    assert data["days_until_renewal"] is None


def test_create_missing_name_is_400(client):
    resp = client.post("/api/v1/subscriptions/", json={"cost": "10"})
    assert resp.status_code == 400
    assert "Name" in resp.json()["detail"]


def test_create_missing_cost_is_400(client):
    resp = client.post("/api/v1/subscriptions/", json={"name": "X"})
    assert resp.status_code == 400


def test_create_invalid_category_is_400(client):
    resp = client.post("/api/v1/subscriptions/", json={"name": "X", "cost": 1, "category": "gaming"})
    assert resp.status_code == 400


def test_list_newest_first(client):
    _create(client, name="First")
    _create(client, name="Second")
    resp = client.get("/api/v1/subscriptions/")
    assert resp.status_code == 200
    assert [s["name"] for s in resp.json()] == ["Second", "First"]


def test_get_one_and_missing(client):
    created = _create(client)
    assert client.get(f"/api/v1/subscriptions/{created['id']}").json()["name"] == "Netflix"
    assert client.get("/api/v1/subscriptions/999").status_code == 404


def test_update_partial(client):
    created = _create(client)
    resp = client.put(f"/api/v1/subscriptions/{created['id']}", json={"cost": "799", "status": "Canceled"})
    assert resp.status_code == 200
    data = resp.json()
    assert data["cost"] == "799.00"
    assert data["status"] == "canceled"
    assert data["shared_with"] == 4
    assert data["first_payment_date"] == "2024-07-12"


def test_update_clears_anchor(client):
    created = _create(client)
    resp = client.put(f"/api/v1/subscriptions/{created['id']}", json={"first_payment_date": None})
    assert resp.status_code == 200
    assert resp.json()["next_renewal"] is None


def test_update_invalid_and_missing(client):
    created = _create(client)
    assert client.put(f"/api/v1/subscriptions/{created['id']}", json={"shared_with": 11}).status_code == 400
    assert client.put("/api/v1/subscriptions/999", json={"name": "X"}).status_code == 404


def test_delete(client):
    created = _create(client)
    resp = client.delete(f"/api/v1/subscriptions/{created['id']}")
    assert resp.status_code == 200
    assert resp.json() == {"message": "Subscription deleted successfully"}
    assert client.get(f"/api/v1/subscriptions/{created['id']}").status_code == 404
    assert client.delete(f"/api/v1/subscriptions/{created['id']}").status_code == 404
