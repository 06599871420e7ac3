from datetime import date, timedelta

from fastapi.testclient import TestClient

from main import app

client = TestClient(app)


def test_health_check():
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["success"] is True
    assert "timestamp" in response.json()


def test_rental_flow(api, property_payload):
    owner = api.post("/auth/register", json={
        "name": "Priya Owner", "email": "priya@example.com", "phone": "9000000001",
        "password": "password123", "role": "owner"
    }).json()
    tenant = api.post("/auth/register", json={
        "name": "Rahul Tenant", "email": "rahul@example.com", "phone": "9000000002",
        "password": "password123"
    }).json()
    owner_headers = {"Authorization": f"Bearer {owner['token']}"}
    tenant_headers = {"Authorization": f"Bearer {tenant['token']}"}
    assert tenant["user"]["role"] == "tenant"

    prop = api.post("/properties", json=property_payload, headers=owner_headers).json()

    found = api.get("/properties", params={"city": "Mumbai", "max_rent": 30000}).json()
    assert [p["id"] for p in found["items"]] == [prop["id"]]

    application = api.post(
        f"/properties/{prop['id']}/applications",
        json={
            "message": "We are a family of three looking for a long stay.",
            "move_in_date": str(date.today() + timedelta(days=14)),
        },
        headers=tenant_headers,
    ).json()
    assert application["status"] == "pending"

    accepted = api.patch(
        f"/applications/{application['id']}", json={"status": "accepted"}, headers=owner_headers
    )
    assert accepted.json()["status"] == "accepted"

    repeated = api.patch(
        f"/applications/{application['id']}", json={"status": "rejected"}, headers=owner_headers
    )
    assert repeated.status_code == 400

    mine = api.get("/applications/me", headers=tenant_headers).json()
    assert [a["status"] for a in mine] == ["accepted"]
