"""
Integration tests for the /rooms endpoints.
"""
import pytest

from app.db.models.subscription import Subscription


ROOM = {
    "name": "Pitch Night",
    "description": "Five minute pitches",
    "capacity": 2,
    "room_type": "pitch",
    "scheduled_start": "2030-05-01T17:00:00Z",
    "scheduled_end": "2030-05-01T18:00:00Z",
    "tags": ["fundraising", "b2b"],
}


@pytest.fixture
def host(make_user):
    return make_user("host@example.com", name="Host")


@pytest.fixture
def guest(make_user):
    return make_user("guest@example.com", name="Guest")


@pytest.fixture
def room_id(client, host, auth_headers):
    response = client.post("/rooms", json=ROOM, headers=auth_headers(host))
    assert response.status_code == 201
    return response.json()["id"]


def test_create_and_get_room(client, room_id, host, auth_headers):
    response = client.get(f"/rooms/{room_id}", headers=auth_headers(host))

    assert response.status_code == 200
    body = response.json()
    assert body["host_name"] == "Host"
    assert body["current_participants"] == 0
    assert "access_code" not in body


def test_create_room_validation(client, host, auth_headers):
    backwards = {**ROOM, "scheduled_end": "2030-05-01T16:00:00Z"}
    private_without_code = {**ROOM, "is_private": True}

    assert client.post("/rooms", json=backwards, headers=auth_headers(host)).status_code == 422
    assert client.post("/rooms", json=private_without_code, headers=auth_headers(host)).status_code == 422


def test_rooms_require_auth(client):
    assert client.get("/rooms").status_code == 401


def test_list_rooms_by_tag_and_status(client, room_id, host, auth_headers):
    by_tag = client.get("/rooms", params={"tags": "b2b,ops"}, headers=auth_headers(host))
    by_status = client.get("/rooms", params={"status": "completed"}, headers=auth_headers(host))

    assert [r["id"] for r in by_tag.json()] == [room_id]
    assert by_status.json() == []


def test_register_and_list_registrations(client, room_id, host, guest, auth_headers):
    registered = client.post(f"/rooms/{room_id}/register", headers=auth_headers(guest))
    assert registered.status_code == 201

    mine = client.get("/rooms/me/registrations", headers=auth_headers(guest))
    assert [r["room_id"] for r in mine.json()] == [room_id]

    as_host = client.get(f"/rooms/{room_id}/registrations", headers=auth_headers(host))
    as_guest = client.get(f"/rooms/{room_id}/registrations", headers=auth_headers(guest))
    assert [r["user_id"] for r in as_host.json()] == [guest.id]
    assert as_guest.status_code == 403

    again = client.post(f"/rooms/{room_id}/register", headers=auth_headers(guest))
    assert again.status_code == 409


def test_register_without_quota_returns_402(client, db, room_id, guest, auth_headers):
    subscription = db.query(Subscription).filter(Subscription.user_id == guest.id).one()
    subscription.events_used = subscription.events_quota
    db.commit()

    response = client.post(f"/rooms/{room_id}/register", headers=auth_headers(guest))

    assert response.status_code == 402
    assert "quota" in response.json()["detail"].lower()


def test_private_room_registration(client, host, guest, auth_headers):
    room = client.post(
        "/rooms", json={**ROOM, "is_private": True, "access_code": "sesame"}, headers=auth_headers(host)
    ).json()

    wrong = client.post(f"/rooms/{room['id']}/register", json={"access_code": "nope"}, headers=auth_headers(guest))
    right = client.post(f"/rooms/{room['id']}/register", json={"access_code": "sesame"}, headers=auth_headers(guest))

    assert wrong.status_code == 403
    assert right.status_code == 201


def test_join_participants_and_leave(client, room_id, host, guest, auth_headers):
    assert client.post(f"/rooms/{room_id}/join", headers=auth_headers(guest)).status_code == 403

    client.post(f"/rooms/{room_id}/register", headers=auth_headers(guest))
    joined = client.post(f"/rooms/{room_id}/join", headers=auth_headers(guest))
    assert joined.status_code == 200
    assert joined.json()["user_name"] == "Guest"

    participants = client.get(f"/rooms/{room_id}/participants", headers=auth_headers(host))
    assert [p["user_id"] for p in participants.json()] == [guest.id]

    active = client.get("/rooms/me/active", headers=auth_headers(guest))
    assert active.json() == {"room_ids": [room_id]}

    assert client.post(f"/rooms/{room_id}/leave", headers=auth_headers(guest)).status_code == 204
    assert client.get(f"/rooms/{room_id}/participants", headers=auth_headers(host)).json() == []


def test_update_and_delete_room(client, room_id, host, guest, auth_headers):
    forbidden = client.patch(f"/rooms/{room_id}", json={"name": "Mine now"}, headers=auth_headers(guest))
    renamed = client.patch(f"/rooms/{room_id}", json={"status": "live"}, headers=auth_headers(host))

    assert forbidden.status_code == 403
    assert renamed.json()["status"] == "live"

    assert client.delete(f"/rooms/{room_id}", headers=auth_headers(host)).status_code == 204
    assert client.get(f"/rooms/{room_id}", headers=auth_headers(host)).status_code == 404


def test_make_room_private_without_code(client, room_id, host, guest, auth_headers):
    response = client.patch(f"/rooms/{room_id}", json={"is_private": True}, headers=auth_headers(host))

    assert response.status_code == 400
    assert "access code" in response.json()["detail"]
    registered = client.post(f"/rooms/{room_id}/register", json={}, headers=auth_headers(guest))
    assert registered.status_code == 201


def test_recommended_rooms_use_profile_interests(client, db, room_id, host, guest, auth_headers):
    guest.interests = ["b2b"]
    db.commit()

    from_profile = client.get("/rooms/recommendations", headers=auth_headers(guest))
    from_query = client.get("/rooms/recommendations", params={"interests": "gaming"}, headers=auth_headers(guest))

    assert from_profile.status_code == 200
    assert [room["id"] for room in from_profile.json()] == [room_id]
    assert from_query.json() == []
