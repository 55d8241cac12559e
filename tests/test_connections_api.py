"""
Integration tests for the connection request endpoints and the change
channel they publish to.
"""
import pytest

from app.services.socket_manager import manager


@pytest.fixture
def alice(make_user):
    return make_user("alice@example.com", name="Alice")


@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com", name="Bob")


def test_request_accept_flow(client, alice, bob, auth_headers):
    sent = client.post(
        "/connections/requests",
        json={"to_user_id": bob.id, "message": "Hi Bob"},
        headers=auth_headers(alice),
    )
    assert sent.status_code == 201
    request_id = sent.json()["id"]

    status_for_alice = client.get(f"/connections/status/{bob.id}", headers=auth_headers(alice)).json()
    assert status_for_alice == {"user_id": bob.id, "status": "pending_sent", "request_id": request_id}

    incoming = client.get("/connections/requests/incoming", headers=auth_headers(bob)).json()
    assert [r["id"] for r in incoming] == [request_id]

    notifications = client.get("/notifications", headers=auth_headers(bob)).json()
    assert notifications["unread_count"] == 1
    assert notifications["notifications"][0]["type"] == "connection_request"

    accepted = client.post(f"/connections/requests/{request_id}/accept", headers=auth_headers(bob))
    assert accepted.json()["status"] == "accepted"

    connections = client.get("/network/connections", headers=auth_headers(alice)).json()
    assert [c["id"] for c in connections] == [bob.id]
    assert client.get(f"/connections/status/{alice.id}", headers=auth_headers(bob)).json()["status"] == "connected"


def test_request_errors(client, alice, bob, auth_headers):
    to_self = client.post("/connections/requests", json={"to_user_id": alice.id}, headers=auth_headers(alice))
    unknown = client.post("/connections/requests", json={"to_user_id": "ghost"}, headers=auth_headers(alice))
    assert to_self.status_code == 400
    assert unknown.status_code == 404

    request_id = client.post(
        "/connections/requests", json={"to_user_id": bob.id}, headers=auth_headers(alice)
    ).json()["id"]
    duplicate = client.post("/connections/requests", json={"to_user_id": alice.id}, headers=auth_headers(bob))
    self_accept = client.post(f"/connections/requests/{request_id}/accept", headers=auth_headers(alice))
    assert duplicate.status_code == 409
    assert self_accept.status_code == 403


def test_request_visible_only_to_parties(client, alice, bob, make_user, auth_headers):
    eve = make_user("eve@example.com")
    request_id = client.post(
        "/connections/requests", json={"to_user_id": bob.id}, headers=auth_headers(alice)
    ).json()["id"]

    assert client.get(f"/connections/requests/{request_id}", headers=auth_headers(bob)).status_code == 200
    assert client.get(f"/connections/requests/{request_id}", headers=auth_headers(eve)).status_code == 404


def test_reject_and_cancel(client, alice, bob, make_user, auth_headers):
    carol = make_user("carol@example.com")
    to_bob = client.post("/connections/requests", json={"to_user_id": bob.id}, headers=auth_headers(alice)).json()
    to_carol = client.post("/connections/requests", json={"to_user_id": carol.id}, headers=auth_headers(alice)).json()

    rejected = client.post(f"/connections/requests/{to_bob['id']}/reject", headers=auth_headers(bob))
    assert rejected.json()["status"] == "rejected"

    assert client.delete(f"/connections/requests/{to_carol['id']}", headers=auth_headers(carol)).status_code == 403
    assert client.delete(f"/connections/requests/{to_carol['id']}", headers=auth_headers(alice)).status_code == 204
    assert client.get("/connections/requests/outgoing", headers=auth_headers(alice)).json() == []


def test_remove_connection(client, alice, bob, auth_headers):
    request_id = client.post(
        "/connections/requests", json={"to_user_id": bob.id}, headers=auth_headers(alice)
    ).json()["id"]
    client.post(f"/connections/requests/{request_id}/accept", headers=auth_headers(bob))

    removed = client.delete(f"/network/connections/{bob.id}", headers=auth_headers(alice))

    assert removed.status_code == 204
    assert client.get("/network/connections", headers=auth_headers(bob)).json() == []
    assert client.get(f"/connections/status/{bob.id}", headers=auth_headers(alice)).json()["status"] == "none"


def test_change_channel_pushes_connection_events(client, alice, bob, auth_headers):
    token = auth_headers(bob)["Authorization"].split()[1]

    with client.websocket_connect(f"/ws?token={token}") as websocket:
        assert websocket.receive_json() == {"type": "ready"}
        assert manager.is_online(bob.id)

        client.post("/connections/requests", json={"to_user_id": bob.id}, headers=auth_headers(alice))

        events = [websocket.receive_json(), websocket.receive_json()]
        assert {event["type"] for event in events} == {"connections", "notification"}

        websocket.send_text("ping")
        assert websocket.receive_json() == {"type": "pong"}


def test_change_channel_rejects_bad_token(client):
    from starlette.websockets import WebSocketDisconnect

    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect("/ws?token=bogus") as websocket:
            websocket.receive_json()
