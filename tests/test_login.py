"""
Tests for login, OAuth profile sync and token handling.
"""
from app.core import config
from app.db.models.user import User


def test_login_success(client, make_user):
    """Test successful login with form data."""
    user = make_user("login@example.com")

    response = client.post(
        "/auth/login",
        data={"username": "login@example.com", "password": "testpass123"},
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["token_type"] == "bearer"
    assert body["user"]["id"] == user.id
    assert body["redirect_to"] == "/events"


def test_login_json(client, make_user):
    make_user("json@example.com")

    response = client.post("/auth/login/json", json={"email": "JSON@example.com", "password": "testpass123"})

    assert response.status_code == 200


def test_login_wrong_password(client, make_user):
    make_user("wrong@example.com")

    response = client.post(
        "/auth/login",
        data={"username": "wrong@example.com", "password": "not-the-password"},
    )

    assert response.status_code == 401
    assert response.json()["detail"] == "Invalid credentials"


def test_login_unknown_email(client):
    response = client.post(
        "/auth/login",
        data={"username": "nobody@example.com", "password": "testpass123"},
    )

    assert response.status_code == 401


def test_login_redirects(client, make_user):
    make_user("admin@example.com", role="admin")
    make_user("new@example.com", onboarding_completed=False)

    admin = client.post("/auth/login/json", json={"email": "admin@example.com", "password": "testpass123"})
    new = client.post("/auth/login/json", json={"email": "new@example.com", "password": "testpass123"})

    assert admin.json()["redirect_to"] == "/admin"
    assert new.json()["redirect_to"] == "/onboarding"


def test_token_grants_access(client, make_user):
    make_user("me@example.com", name="Me")
    token = client.post(
        "/auth/login/json", json={"email": "me@example.com", "password": "testpass123"}
    ).json()["access_token"]

    response = client.get("/users/me", headers={"Authorization": f"Bearer {token}"})

    assert response.status_code == 200
    assert response.json()["name"] == "Me"


def test_invalid_token_rejected(client):
    response = client.get("/users/me", headers={"Authorization": "Bearer not-a-jwt"})

    assert response.status_code == 401


def test_oauth_sync_not_configured(client, monkeypatch):
    monkeypatch.setattr(config, "OAUTH_SYNC_SECRET", None)

    response = client.post("/auth/oauth/sync", json={"email": "g@example.com"})

    assert response.status_code == 503


def test_oauth_sync_wrong_secret(client, monkeypatch):
    monkeypatch.setattr(config, "OAUTH_SYNC_SECRET", "s3cret")

    response = client.post(
        "/auth/oauth/sync",
        json={"email": "g@example.com"},
        headers={"X-Sync-Secret": "guess"},
    )

    assert response.status_code == 401


def test_oauth_sync_creates_account(client, db, monkeypatch):
    monkeypatch.setattr(config, "OAUTH_SYNC_SECRET", "s3cret")

    response = client.post(
        "/auth/oauth/sync",
        json={"email": "g@example.com", "name": "Grace", "photo_url": "https://img/g.png", "provider": "google"},
        headers={"X-Sync-Secret": "s3cret"},
    )

    assert response.status_code == 200
    assert response.json()["redirect_to"] == "/onboarding"

    user = db.query(User).filter(User.email == "g@example.com").first()
    assert user.auth_provider == "google"
    assert user.password_hash is None
    assert user.subscription.status == "trial"


def test_oauth_sync_keeps_local_profile(client, db, make_user, monkeypatch):
    monkeypatch.setattr(config, "OAUTH_SYNC_SECRET", "s3cret")
    user = make_user("linked@example.com", name="Local Name")

    response = client.post(
        "/auth/oauth/sync",
        json={"email": "linked@example.com", "name": "Provider Name", "photo_url": "https://img/p.png", "provider": "linkedin"},
        headers={"X-Sync-Secret": "s3cret"},
    )

    assert response.status_code == 200
    db.refresh(user)
    assert user.name == "Local Name"
    assert user.photo_url == "https://img/p.png"
