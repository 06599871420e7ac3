import pytest
from unittest.mock import MagicMock, patch
from fastapi.testclient import TestClient
from main import app
from database import get_db
from routers.auth import create_access_token, get_current_user
from errors import UnauthorizedError
import models


@pytest.fixture
def client():
    return TestClient(app)


REGISTER_PAYLOAD = {
    "name": "Ivan Ivanov", "email": "new@example.com", "phone": "9876543210",
    "password": "password123", "role": "tenant"
}


@patch("routers.auth.pwd_context.hash")
def test_register_success(mock_hash, client):
    mock_hash.return_value = "fake_hashed_password"

    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db

    def mock_add_side_effect(user_obj):
        user_obj.id = 1
        return None

    mock_db.add.side_effect = mock_add_side_effect
    mock_db.query.return_value.filter.return_value.first.return_value = None

    response = client.post("/auth/register", json=REGISTER_PAYLOAD)

    assert response.status_code == 201
    assert response.json()["user"]["id"] == 1
    assert response.json()["user"]["role"] == "tenant"
    assert response.json()["token"]
    assert mock_db.commit.called
    mock_hash.assert_called_once_with("password123")


@patch("routers.auth.pwd_context.hash")
def test_register_email_already_exists(mock_hash, client):
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    mock_db.query.return_value.filter.return_value.first.return_value = models.User(id=1)

    response = client.post("/auth/register", json=REGISTER_PAYLOAD)
    assert response.status_code == 409
    assert response.json()["detail"] == "Email already registered"
    assert not mock_hash.called


def test_register_cannot_pick_admin_role(client):
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db

    response = client.post("/auth/register", json={**REGISTER_PAYLOAD, "role": "admin"})
    assert response.status_code == 422


def test_register_rejects_short_password_and_bad_phone(client):
    response = client.post(
        "/auth/register",
        json={**REGISTER_PAYLOAD, "password": "short", "phone": "12345"}
    )
    assert response.status_code == 422


def test_login_success(client):
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db

    with pytest.MonkeyPatch().context() as mp:
        from routers.auth import pwd_context
        mp.setattr(pwd_context, "verify", lambda p, h: True)

        fake_user = models.User(
            id=7, name="Test User", email="testuser@example.com", phone="9876543210",
            hashed_password="hashed", role="owner"
        )
        mock_db.query.return_value.filter.return_value.first.return_value = fake_user

        response = client.post("/auth/login", json={"email": "testuser@example.com", "password": "password"})

        assert response.status_code == 200
        assert response.json()["user"]["email"] == "testuser@example.com"
        assert response.cookies.get("access_token") == response.json()["token"]


def test_login_invalid_credentials(client):
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db

    mock_db.query.return_value.filter.return_value.first.return_value = None

    response = client.post("/auth/login", json={"email": "wrong@example.com", "password": "password"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid email or password"
    assert response.headers["www-authenticate"] == "Bearer"


def test_logout(client):
    response = client.get("/auth/logout")
    assert response.status_code == 200
    cookies = response.headers.get("set-cookie", "")
    assert 'access_token=""' in cookies or 'Max-Age=0' in cookies


def test_get_current_user_no_token():
    mock_request = MagicMock()
    mock_request.cookies = {}

    with pytest.raises(UnauthorizedError) as exc:
        get_current_user(request=mock_request, credentials=None, db=MagicMock())
    assert exc.value.status_code == 401


def test_me_requires_token(client):
    response = client.get("/auth/me")
    assert response.status_code == 401
    assert response.json()["detail"] == "No token provided"


def test_me_rejects_garbage_token(client):
    response = client.get("/auth/me", headers={"Authorization": "Bearer not-a-jwt"})
    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid token"


def test_me_rejects_token_of_deleted_user(client):
    mock_db = MagicMock()
    app.dependency_overrides[get_db] = lambda: mock_db
    mock_db.query.return_value.filter.return_value.first.return_value = None

    token = create_access_token(models.User(id=42, email="gone@example.com", role="tenant"))
    response = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert response.status_code == 401
    assert response.json()["detail"] == "User no longer exists"


def test_me_accepts_cookie_token(api, make_user):
    user = make_user("tenant")
    api.cookies.set("access_token", create_access_token(user))

    response = api.get("/auth/me")
    assert response.status_code == 200
    assert response.json()["id"] == user.id


def test_register_then_login_round(api):
    response = api.post("/auth/register", json={**REGISTER_PAYLOAD, "email": "Mixed@Example.com"})
    assert response.status_code == 201
    assert response.json()["user"]["email"] == "mixed@example.com"

    again = api.post("/auth/register", json={**REGISTER_PAYLOAD, "email": "mixed@example.com"})
    assert again.status_code == 409

    login = api.post("/auth/login", json={"email": "mixed@example.com", "password": "password123"})
    assert login.status_code == 200
    token = login.json()["token"]

    me = api.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["kyc_status"] == "not_submitted"

    wrong = api.post("/auth/login", json={"email": "mixed@example.com", "password": "nope-nope"})
    assert wrong.status_code == 401
