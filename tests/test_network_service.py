"""
Unit tests for the member directory, search and recommendations.
"""
from app.services.network_service import (
    get_connection_profiles,
    get_connection_recommendations,
    get_network_users,
    search_users,
)


def _connect(db, user, other):
    user.connections = list(user.connections or []) + [other.id]
    other.connections = list(other.connections or []) + [user.id]
    db.commit()


def test_network_users_excludes_self_and_admins(db, make_user):
    me = make_user("me@example.com")
    other = make_user("other@example.com")
    make_user("admin@example.com", role="admin")

    users = get_network_users(db, me.id)

    assert [u.id for u in users] == [other.id]


def test_search_matches_name_company_title_and_skills(db, make_user):
    me = make_user("me@example.com")
    by_name = make_user("n@example.com", name="Priya Patel")
    by_company = make_user("c@example.com", name="Sam", company="Patelware")
    by_title = make_user("t@example.com", name="Lee", title="Head of Growth")
    by_skill = make_user("s@example.com", name="Kim", skills=["Growth Marketing"])
    make_user("x@example.com", name="Unrelated")

    patel = {u.id for u in search_users(db, "PATEL", me.id)}
    growth = {u.id for u in search_users(db, "growth", me.id)}

    assert patel == {by_name.id, by_company.id}
    assert growth == {by_title.id, by_skill.id}


def test_empty_search_returns_directory(db, make_user):
    me = make_user("me@example.com")
    make_user("a@example.com")
    make_user("b@example.com")

    assert len(search_users(db, "   ", me.id)) == 2


def test_connection_profiles(db, make_user):
    me = make_user("me@example.com")
    friend = make_user("friend@example.com", name="Friend")
    make_user("stranger@example.com")
    _connect(db, me, friend)

    profiles = get_connection_profiles(db, me.id)

    assert [p.id for p in profiles] == [friend.id]


def test_recommendations_prefer_shared_skills(db, make_user):
    me = make_user("me@example.com", skills=["Python", "Fundraising"])
    match = make_user("match@example.com", skills=["fundraising"])
    filler = make_user("filler@example.com", skills=["Design"])

    recommended = get_connection_recommendations(db, me.id, me.skills)

    assert [u.id for u in recommended] == [match.id, filler.id]


def test_recommendations_exclude_connections(db, make_user):
    me = make_user("me@example.com", skills=["Python"])
    friend = make_user("friend@example.com", skills=["Python"])
    other = make_user("other@example.com", skills=["Python"])
    _connect(db, me, friend)

    recommended = get_connection_recommendations(db, me.id, me.skills)

    assert [u.id for u in recommended] == [other.id]


def test_recommendations_capped_at_ten(db, make_user):
    me = make_user("me@example.com", skills=["Python"])
    for i in range(14):
        make_user(f"user{i}@example.com", skills=["Python"] if i % 2 else ["Go"])

    recommended = get_connection_recommendations(db, me.id, me.skills)

    assert len(recommended) == 10
    # All seven skill matches come before any filler
    assert all("Python" in u.skills for u in recommended[:7])


def test_network_endpoints(client, db, make_user, auth_headers):
    me = make_user("me@example.com", skills=["SaaS"])
    make_user("peer@example.com", name="Peer", skills=["saas"])

    users = client.get("/network/users", headers=auth_headers(me))
    search = client.get("/network/search", params={"q": "peer"}, headers=auth_headers(me))
    recs = client.get("/network/recommendations", headers=auth_headers(me))

    assert users.status_code == 200
    assert [u["name"] for u in users.json()] == ["Peer"]
    assert [u["name"] for u in search.json()] == ["Peer"]
    assert [u["name"] for u in recs.json()] == ["Peer"]
