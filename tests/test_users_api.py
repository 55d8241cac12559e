"""
Integration tests for profile and admin user endpoints.
"""


def test_update_profile(client, make_user, auth_headers):
    user = make_user("me@example.com", onboarding_completed=False)

    response = client.patch(
        "/users/me",
        json={
            "title": "Founder",
            "company": "Acme",
            "skills": ["Python", " Python ", "Sales", ""],
            "onboarding_completed": True,
        },
        headers=auth_headers(user),
    )

    assert response.status_code == 200
    body = response.json()
    assert body["title"] == "Founder"
    assert body["skills"] == ["Python", "Sales"]
    assert body["onboarding_completed"] is True
    assert body["name"] == "Test User"


def test_my_subscription(client, make_user, auth_headers):
    user = make_user("me@example.com")

    response = client.get("/users/me/subscription", headers=auth_headers(user))

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "trial"
    assert body["trial_expired"] is False
    assert body["events_remaining"] == 3


def test_public_profile(client, make_user, auth_headers):
    me = make_user("me@example.com")
    other = make_user("other@example.com", name="Other", company="Globex")

    found = client.get(f"/users/{other.id}", headers=auth_headers(me))
    missing = client.get("/users/nobody", headers=auth_headers(me))

    assert found.json()["company"] == "Globex"
    assert "subscription" not in found.json()
    assert missing.status_code == 404


def test_admin_endpoints_require_admin(client, make_user, auth_headers):
    user = make_user("me@example.com")

    assert client.get("/users", headers=auth_headers(user)).status_code == 403
    assert client.patch(f"/users/{user.id}/role", json={"role": "admin"}, headers=auth_headers(user)).status_code == 403


def test_admin_promotes_user(client, make_user, auth_headers):
    admin = make_user("admin@example.com", role="admin")
    user = make_user("me@example.com")

    listed = client.get("/users", params={"role": "user"}, headers=auth_headers(admin))
    promoted = client.patch(f"/users/{user.id}/role", json={"role": "admin"}, headers=auth_headers(admin))
    unknown = client.patch("/users/nobody/role", json={"role": "admin"}, headers=auth_headers(admin))

    assert [u["id"] for u in listed.json()] == [user.id]
    assert promoted.json()["role"] == "admin"
    assert unknown.status_code == 404


def test_root_and_health(client):
    assert client.get("/").json() == {"message": "inrooms API server running"}
    assert client.get("/system/health").status_code == 200
