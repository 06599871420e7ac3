from datetime import datetime, timedelta, timezone

import pytest


def _in_days(days):
    return (datetime.now(timezone.utc) + timedelta(days=days)).isoformat()


@pytest.fixture
def listing(make_user, make_property):
    owner = make_user("owner")
    return owner, make_property(owner)


@pytest.fixture
def visit(api, make_user, listing, auth_headers):
    owner, prop = listing
    tenant = make_user("tenant")
    response = api.post(
        f"/properties/{prop.id}/visit-requests",
        json={"preferred_date_time": _in_days(2), "notes": "  Evening works best  "},
        headers=auth_headers(tenant),
    )
    assert response.status_code == 201
    return owner, tenant, response.json()


def test_visit_request_is_pending(visit):
    owner, tenant, data = visit
    assert data["status"] == "pending"
    assert data["owner_id"] == owner.id
    assert data["tenant_id"] == tenant.id
    assert data["notes"] == "Evening works best"


def test_visit_time_must_be_in_future(api, make_user, listing, auth_headers):
    _, prop = listing
    headers = auth_headers(make_user("tenant"))
    url = f"/properties/{prop.id}/visit-requests"

    assert api.post(url, json={"preferred_date_time": _in_days(-1)}, headers=headers).status_code == 422
    assert api.post(
        url, json={"preferred_date_time": _in_days(1), "notes": "x" * 501}, headers=headers
    ).status_code == 422


def test_cannot_visit_own_property(api, listing, auth_headers):
    owner, prop = listing

    response = api.post(
        f"/properties/{prop.id}/visit-requests",
        json={"preferred_date_time": _in_days(2)},
        headers=auth_headers(owner),
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "You cannot request to visit your own property"


def test_accept_then_complete(api, visit, auth_headers):
    owner, _, data = visit
    url = f"/visit-requests/{data['id']}"

    assert api.patch(url, json={"status": "accepted"}, headers=auth_headers(owner)).json()["status"] == "accepted"
    completed = api.patch(url, json={"status": "completed"}, headers=auth_headers(owner))
    assert completed.status_code == 200
    assert completed.json()["status"] == "completed"

    assert api.patch(url, json={"status": "cancelled"}, headers=auth_headers(owner)).status_code == 400


def test_pending_visit_cannot_be_completed(api, visit, auth_headers):
    owner, _, data = visit

    response = api.patch(
        f"/visit-requests/{data['id']}", json={"status": "completed"}, headers=auth_headers(owner)
    )
    assert response.status_code == 400


def test_only_recorded_owner_may_respond(api, make_user, visit, auth_headers):
    _, tenant, data = visit
    url = f"/visit-requests/{data['id']}"

    response = api.patch(url, json={"status": "accepted"}, headers=auth_headers(make_user("owner")))
    assert response.status_code == 403
    assert response.json()["detail"] == "You are not authorized to update this visit request"

    assert api.patch(url, json={"status": "accepted"}, headers=auth_headers(tenant)).status_code == 403


def test_missing_visit_request(api, listing, auth_headers):
    owner, _ = listing

    response = api.patch("/visit-requests/999", json={"status": "accepted"}, headers=auth_headers(owner))
    assert response.status_code == 404
    assert response.json()["detail"] == "Visit request not found"


def test_visit_listings(api, make_user, visit, auth_headers):
    owner, tenant, data = visit

    mine = api.get("/visit-requests/me", headers=auth_headers(tenant))
    assert [v["id"] for v in mine.json()] == [data["id"]]

    received = api.get("/owner/visit-requests", headers=auth_headers(owner))
    assert [v["id"] for v in received.json()] == [data["id"]]

    assert api.get("/visit-requests/me", headers=auth_headers(make_user("tenant"))).json() == []
    assert api.get("/owner/visit-requests", headers=auth_headers(tenant)).status_code == 403
