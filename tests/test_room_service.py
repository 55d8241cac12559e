"""
Unit tests for Rooms: creation, quota-checked registration and presence.
"""
from datetime import datetime, timedelta, timezone

import pytest
from google.auth.exceptions import RefreshError

from app.core.exceptions import (
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    PermissionDeniedError,
    QuotaExceededError,
)
from app.db.base import utcnow
from app.db.models.subscription import Subscription
from app.services import meet_service, quota_service, room_service


START = datetime(2030, 5, 1, 17, 0)


def room_data(**overrides):
    data = {
        "name": "Founder Friday",
        "description": "Speed networking",
        "capacity": 5,
        "room_type": "networking",
        "scheduled_start": START,
        "scheduled_end": START + timedelta(hours=1),
        "tags": ["saas"],
    }
    data.update(overrides)
    return data


@pytest.fixture
def host(make_user):
    return make_user("host@example.com", name="Host")


@pytest.fixture
def guest(make_user):
    return make_user("guest@example.com", name="Guest")


@pytest.fixture
def room(db, host):
    return room_service.create_room(db, host, room_data())


def test_create_room(db, host, room):
    assert room.host_id == host.id
    assert room.host_name == "Host"
    assert room.status == "scheduled"
    assert room.current_participants == 0
    assert room.meeting_link is None


def test_create_room_converts_aware_times(db, host):
    start = datetime(2030, 5, 1, 19, 0, tzinfo=timezone(timedelta(hours=2)))
    room = room_service.create_room(
        db, host, room_data(scheduled_start=start, scheduled_end=start + timedelta(hours=1))
    )

    assert room.scheduled_start == START


def test_create_room_with_meet_link(db, host, monkeypatch):
    monkeypatch.setattr(
        meet_service,
        "create_meet_link",
        lambda **kwargs: {"meet_link": "https://meet.google.com/abc-defg-hij", "event_id": "evt_1"},
    )

    room = room_service.create_room(db, host, room_data(), create_meet_link=True)

    assert room.meeting_link == "https://meet.google.com/abc-defg-hij"
    assert room.calendar_event_id == "evt_1"


def test_create_room_survives_meet_failure(db, host, monkeypatch):
    def failing(**kwargs):
        raise ExternalServiceError("Failed to create Google Meet event")

    monkeypatch.setattr(meet_service, "create_meet_link", failing)

    room = room_service.create_room(db, host, room_data(), create_meet_link=True)

    assert room.id
    assert room.meeting_link is None


class RejectedCredentialsCalendar:
    """Calendar whose token refresh is refused by Google."""

    def events(self):
        return self

    def insert(self, **kwargs):
        return self

    def execute(self):
        raise RefreshError("invalid_grant: Invalid JWT Signature.")


def test_create_room_survives_rejected_google_credentials(db, host, monkeypatch):
    monkeypatch.setattr(meet_service, "get_calendar_service", lambda: RejectedCredentialsCalendar())

    room = room_service.create_room(db, host, room_data(), create_meet_link=True)

    assert room.id
    assert room.meeting_link is None
    assert room.calendar_event_id is None


def test_register_consumes_quota(db, room, guest):
    registration = room_service.register_for_room(db, room.id, guest)

    assert registration.user_id == guest.id
    db.refresh(room)
    assert room.current_participants == 1
    subscription = db.query(Subscription).filter(Subscription.user_id == guest.id).one()
    assert subscription.events_used == 1
    assert subscription.events_remaining == 2


def test_register_twice(db, room, guest):
    room_service.register_for_room(db, room.id, guest)

    with pytest.raises(ConflictError):
        room_service.register_for_room(db, room.id, guest)


def test_register_full_room(db, host, make_user):
    room = room_service.create_room(db, host, room_data(capacity=1))
    room_service.register_for_room(db, room.id, make_user("first@example.com"))

    with pytest.raises(ConflictError, match="full"):
        room_service.register_for_room(db, room.id, make_user("second@example.com"))


def test_register_private_room_needs_code(db, host, guest):
    room = room_service.create_room(db, host, room_data(is_private=True, access_code="letmein"))

    with pytest.raises(PermissionDeniedError):
        room_service.register_for_room(db, room.id, guest, access_code="guess")

    assert room_service.register_for_room(db, room.id, guest, access_code="letmein")


def test_register_quota_exhausted(db, host, guest):
    rooms = [room_service.create_room(db, host, room_data(name=f"Room {i}")) for i in range(4)]
    for room in rooms[:3]:
        room_service.register_for_room(db, room.id, guest)

    with pytest.raises(QuotaExceededError):
        room_service.register_for_room(db, rooms[3].id, guest)

    db.refresh(rooms[3])
    assert rooms[3].current_participants == 0


def test_register_expired_trial(db, room, guest):
    subscription = db.query(Subscription).filter(Subscription.user_id == guest.id).one()
    subscription.trial_ends_at = utcnow() - timedelta(days=1)
    db.commit()

    with pytest.raises(QuotaExceededError, match="trial"):
        room_service.register_for_room(db, room.id, guest)


def test_register_inactive_subscription(db, room, guest):
    subscription = db.query(Subscription).filter(Subscription.user_id == guest.id).one()
    subscription.status = "inactive"
    db.commit()

    with pytest.raises(QuotaExceededError):
        room_service.register_for_room(db, room.id, guest)


def test_register_closed_room(db, room, host, guest):
    room_service.update_room(db, room.id, host, {"status": "cancelled"})

    with pytest.raises(ConflictError):
        room_service.register_for_room(db, room.id, guest)


def test_unregister_does_not_refund(db, room, guest):
    room_service.register_for_room(db, room.id, guest)

    room_service.unregister_from_room(db, room.id, guest)

    db.refresh(room)
    assert room.current_participants == 0
    subscription = db.query(Subscription).filter(Subscription.user_id == guest.id).one()
    assert subscription.events_used == 1
    with pytest.raises(NotFoundError):
        room_service.unregister_from_room(db, room.id, guest)


def test_update_room_permissions(db, room, guest, make_user):
    with pytest.raises(PermissionDeniedError):
        room_service.update_room(db, room.id, guest, {"name": "Hijacked"})

    admin = make_user("admin@example.com", role="admin")
    updated = room_service.update_room(db, room.id, admin, {"name": "Renamed", "tags": ["ai"]})

    assert updated.name == "Renamed"
    assert updated.tags == ["ai"]


def test_update_room_rejects_bad_schedule(db, room, host):
    with pytest.raises(ValueError):
        room_service.update_room(db, room.id, host, {"scheduled_end": START - timedelta(hours=1)})


def test_update_room_capacity_below_registrations(db, room, host, guest, make_user):
    room_service.register_for_room(db, room.id, guest)
    room_service.register_for_room(db, room.id, make_user("other@example.com"))

    with pytest.raises(ConflictError):
        room_service.update_room(db, room.id, host, {"capacity": 1})


def test_delete_room(db, room, host, guest):
    with pytest.raises(PermissionDeniedError):
        room_service.delete_room(db, room.id, guest)

    room_service.delete_room(db, room.id, host)

    assert room_service.get_room(db, room.id) is None


def test_list_rooms_filters(db, host, make_user):
    other_host = make_user("other-host@example.com")
    early = room_service.create_room(db, host, room_data(name="Early", tags=["ai"]))
    late = room_service.create_room(
        db, other_host,
        room_data(
            name="Late",
            room_type="workshop",
            scheduled_start=START + timedelta(days=2),
            scheduled_end=START + timedelta(days=2, hours=1),
            tags=["design"],
        ),
    )

    assert [r.id for r in room_service.list_rooms(db)] == [early.id, late.id]
    assert [r.id for r in room_service.list_rooms(db, room_type="workshop")] == [late.id]
    assert [r.id for r in room_service.list_rooms(db, host_id=host.id)] == [early.id]
    assert [r.id for r in room_service.list_rooms(db, tags=["design", "ops"])] == [late.id]
    assert [r.id for r in room_service.list_rooms(db, start=START + timedelta(days=1))] == [late.id]
    assert [r.id for r in room_service.list_rooms(db, end=START)] == [early.id]


def test_join_requires_registration(db, room, guest):
    with pytest.raises(PermissionDeniedError):
        room_service.join_room(db, room.id, guest)

    room_service.register_for_room(db, room.id, guest)
    participant = room_service.join_room(db, room.id, guest)

    assert participant.role == "participant"
    assert participant.user_name == "Guest"
    # Joining again returns the same active row
    assert room_service.join_room(db, room.id, guest).id == participant.id


def test_host_joins_without_registration(db, room, host):
    participant = room_service.join_room(db, room.id, host)

    assert participant.role == "host"
    assert room_service.get_user_active_rooms(db, host.id) == [room.id]


def test_leave_room(db, room, host):
    room_service.join_room(db, room.id, host)

    left = room_service.leave_room(db, room.id, host.id)

    assert left.left_at is not None
    assert room_service.get_room_participants(db, room.id) == []
    assert room_service.leave_room(db, room.id, host.id) is None


def test_create_private_room_requires_code(db, host):
    with pytest.raises(ValueError, match="access code"):
        room_service.create_room(db, host, room_data(is_private=True))


def test_update_room_private_requires_code(db, room, host, guest):
    with pytest.raises(ValueError, match="access code"):
        room_service.update_room(db, room.id, host, {"is_private": True})

    db.refresh(room)
    assert room.is_private is False
    updated = room_service.update_room(db, room.id, host, {"is_private": True, "access_code": "letmein"})
    assert updated.is_private is True
    with pytest.raises(PermissionDeniedError):
        room_service.register_for_room(db, room.id, guest)


def test_register_private_room_without_stored_code(db, room, guest):
    """Rows written before codes were enforced admit nobody."""
    room.is_private = True
    room.access_code = None
    db.commit()

    with pytest.raises(PermissionDeniedError):
        room_service.register_for_room(db, room.id, guest)
    with pytest.raises(PermissionDeniedError):
        room_service.register_for_room(db, room.id, guest, access_code=None)


def test_update_end_only_with_aware_stored_start(db, room, host):
    # Postgres hands timestamptz columns back as aware datetimes
    room.scheduled_start = datetime(2030, 5, 1, 19, 0, tzinfo=timezone(timedelta(hours=2)))

    updated = room_service.update_room(db, room.id, host, {"scheduled_end": START + timedelta(hours=2)})

    assert updated.scheduled_end == START + timedelta(hours=2)


def test_update_end_before_aware_stored_start(db, room, host):
    room.scheduled_start = datetime(2030, 5, 1, 17, 0, tzinfo=timezone.utc)

    with pytest.raises(ValueError, match="scheduled_end"):
        room_service.update_room(db, room.id, host, {"scheduled_end": START - timedelta(minutes=30)})


def test_trial_expiry_with_aware_timestamps(db, guest):
    subscription = db.query(Subscription).filter(Subscription.user_id == guest.id).one()

    subscription.trial_ends_at = datetime.now(timezone(timedelta(hours=-5))) - timedelta(hours=1)
    assert quota_service.is_trial_expired(subscription)

    subscription.trial_ends_at = datetime.now(timezone(timedelta(hours=9))) + timedelta(hours=1)
    assert not quota_service.is_trial_expired(subscription)


def test_event_recommendations_match_interests(db, host):
    two_days = timedelta(days=2)
    later = room_service.create_room(
        db, host, room_data(name="Later", tags=["ai"], scheduled_start=START + two_days, scheduled_end=START + two_days + timedelta(hours=1))
    )
    sooner = room_service.create_room(db, host, room_data(name="Sooner", tags=["cloud", "ai"]))
    room_service.create_room(db, host, room_data(name="Unrelated", tags=["fintech"]))
    past_start = utcnow() - timedelta(days=1)
    room_service.create_room(
        db, host, room_data(name="Past", tags=["ai"], scheduled_start=past_start, scheduled_end=past_start + timedelta(hours=1))
    )
    cancelled = room_service.create_room(db, host, room_data(name="Cancelled", tags=["ai"]))
    room_service.update_room(db, cancelled.id, host, {"status": "cancelled"})

    rooms = room_service.get_event_recommendations(db, ["ai", "security"])

    assert [room.id for room in rooms] == [sooner.id, later.id]
    assert room_service.get_event_recommendations(db, []) == []


def test_event_recommendations_limit(db, host):
    for i in range(7):
        room_service.create_room(db, host, room_data(name=f"Room {i}", tags=["ai"]))

    assert len(room_service.get_event_recommendations(db, ["ai"])) == 5
    assert len(room_service.get_event_recommendations(db, ["ai"], limit=2)) == 2
