"""
Room service.

CRUD for Rooms, quota-checked registration and live presence tracking.
"""
import logging
from datetime import datetime
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, ExternalServiceError, NotFoundError, PermissionDeniedError
from app.core.logging_config import sanitize_log_data
from app.db.base import to_utc_naive, utcnow
from app.db.models.room import Room, RoomParticipant, RoomRegistration
from app.db.models.user import User
from app.services import meet_service
from app.services.quota_service import consume_event, get_subscription_for_user

logger = logging.getLogger(__name__)

OPEN_STATUSES = ("scheduled", "live")
UPDATABLE_FIELDS = (
    "name",
    "description",
    "capacity",
    "status",
    "room_type",
    "is_private",
    "access_code",
    "scheduled_start",
    "scheduled_end",
    "meeting_link",
    "recording_url",
    "tags",
)


def _can_manage(room: Room, user: User) -> bool:
    return user.role == "admin" or room.host_id == user.id


def get_room(db: Session, room_id: str) -> Optional[Room]:
    return db.query(Room).filter(Room.id == room_id).first()


def _get_room_or_404(db: Session, room_id: str) -> Room:
    room = get_room(db, room_id)
    if not room:
        raise NotFoundError("Room not found")
    return room


def create_room(db: Session, host: User, room_data: dict, create_meet_link: bool = False) -> Room:
    """
    Create a Room hosted by `host`.
    
    When `create_meet_link` is set a Google Meet link is minted; if Google
    fails the Room is still created without a link.
    """
    if room_data.get("is_private") and not room_data.get("access_code"):
        raise ValueError("Private Rooms need an access code")

    room = Room(
        name=room_data["name"],
        description=room_data.get("description") or "",
        host_id=host.id,
        capacity=room_data["capacity"],
        current_participants=0,
        status="scheduled",
        room_type=room_data.get("room_type") or "networking",
        is_private=bool(room_data.get("is_private")),
        access_code=room_data.get("access_code"),
        scheduled_start=to_utc_naive(room_data["scheduled_start"]),
        scheduled_end=to_utc_naive(room_data["scheduled_end"]),
        meeting_link=room_data.get("meeting_link"),
        tags=list(room_data.get("tags") or []),
    )

    if create_meet_link and not room.meeting_link:
        try:
            meet = meet_service.create_meet_link(
                title=room.name,
                description=room.description,
                start_time=room.scheduled_start,
                end_time=room.scheduled_end,
            )
            room.meeting_link = meet["meet_link"]
            room.calendar_event_id = meet["event_id"]
        except ExternalServiceError as e:
            logger.warning(f"Room created without Meet link: {e}")

    db.add(room)
    db.commit()
    db.refresh(room)

    logger.info(f"Room created: room_id={room.id}, host_id={host.id}, type={room.room_type}")
    return room


def update_room(db: Session, room_id: str, user: User, updates: dict) -> Room:
    room = _get_room_or_404(db, room_id)
    if not _can_manage(room, user):
        raise PermissionDeniedError("Only the host or an admin can edit this Room")

    for field in UPDATABLE_FIELDS:
        if field in updates and updates[field] is not None:
            value = updates[field]
            if field in ("scheduled_start", "scheduled_end"):
                value = to_utc_naive(value)
            elif field == "tags":
                value = list(value)
            setattr(room, field, value)

    if to_utc_naive(room.scheduled_end) <= to_utc_naive(room.scheduled_start):
        db.rollback()
        raise ValueError("scheduled_end must be after scheduled_start")

    if room.is_private and not room.access_code:
        db.rollback()
        raise ValueError("Private Rooms need an access code")

    if room.capacity < room.current_participants:
        db.rollback()
        raise ConflictError(f"Capacity cannot be below current registrations ({room.current_participants})")

    room.updated_at = utcnow()
    db.commit()
    db.refresh(room)

    logger.info(f"Room updated: room_id={room.id}, changes={sanitize_log_data(updates)}")
    return room


def delete_room(db: Session, room_id: str, user: User) -> None:
    room = _get_room_or_404(db, room_id)
    if not _can_manage(room, user):
        raise PermissionDeniedError("Only the host or an admin can delete this Room")

    db.delete(room)
    db.commit()
    logger.info(f"Room deleted: room_id={room_id}, by={user.id}")


def list_rooms(
    db: Session,
    room_type: Optional[str] = None,
    status: Optional[str] = None,
    host_id: Optional[str] = None,
    tags: Optional[List[str]] = None,
    start: Optional[datetime] = None,
    end: Optional[datetime] = None,
) -> List[Room]:
    """
    Rooms matching every given filter, soonest first.
    
    `tags` matches Rooms carrying any of the tags; `start`/`end` bound
    scheduled_start inclusively.
    """
    query = db.query(Room)
    if room_type:
        query = query.filter(Room.room_type == room_type)
    if status:
        query = query.filter(Room.status == status)
    if host_id:
        query = query.filter(Room.host_id == host_id)
    if start:
        query = query.filter(Room.scheduled_start >= to_utc_naive(start))
    if end:
        query = query.filter(Room.scheduled_start <= to_utc_naive(end))

    rooms = query.order_by(Room.scheduled_start.asc()).all()

    # Tags are JSON; filter in Python
    if tags:
        wanted = set(tags)
        rooms = [room for room in rooms if wanted & set(room.tags or [])]
    return rooms


def get_event_recommendations(db: Session, interests: Optional[List[str]], limit: int = 5) -> List[Room]:
    """
    Upcoming open Rooms tagged with any of the member's interests, soonest first.
    """
    wanted = set(interests or [])
    if not wanted:
        return []

    upcoming = (
        db.query(Room)
        .filter(Room.scheduled_start > utcnow(), Room.status.in_(OPEN_STATUSES))
        .order_by(Room.scheduled_start.asc())
        .all()
    )
    return [room for room in upcoming if wanted & set(room.tags or [])][:limit]


def register_for_room(db: Session, room_id: str, user: User, access_code: Optional[str] = None) -> RoomRegistration:
    """
    Register the user for a Room, consuming one unit of events quota.
    
    Raises:
        NotFoundError: Unknown room
        PermissionDeniedError: Wrong or missing access code for a private Room
        ConflictError: Room closed, full, or user already registered
        QuotaExceededError: No quota left on the subscription
    """
    room = _get_room_or_404(db, room_id)

    if room.status not in OPEN_STATUSES:
        raise ConflictError(f"Room is {room.status}")

    # A private Room without a code admits nobody
    if room.is_private and (not room.access_code or access_code != room.access_code):
        raise PermissionDeniedError("Invalid access code")

    existing = (
        db.query(RoomRegistration)
        .filter(RoomRegistration.room_id == room.id, RoomRegistration.user_id == user.id)
        .first()
    )
    if existing:
        raise ConflictError("Already registered for this Room")

    if room.is_full:
        raise ConflictError("Room is full")

    subscription = get_subscription_for_user(db, user.id)
    consume_event(subscription)

    registration = RoomRegistration(room_id=room.id, user_id=user.id)
    db.add(registration)
    room.current_participants = room.current_participants + 1
    db.commit()
    db.refresh(registration)

    logger.info(f"Room registration: room_id={room.id}, user_id={user.id}, count={room.current_participants}/{room.capacity}")
    return registration


def unregister_from_room(db: Session, room_id: str, user: User) -> None:
    """Drop a registration. Consumed quota is not refunded."""
    room = _get_room_or_404(db, room_id)
    registration = (
        db.query(RoomRegistration)
        .filter(RoomRegistration.room_id == room.id, RoomRegistration.user_id == user.id)
        .first()
    )
    if not registration:
        raise NotFoundError("Not registered for this Room")

    db.delete(registration)
    room.current_participants = max(0, room.current_participants - 1)
    db.commit()
    logger.info(f"Room unregistration: room_id={room.id}, user_id={user.id}")


def get_user_registrations(db: Session, user_id: str) -> List[RoomRegistration]:
    return (
        db.query(RoomRegistration)
        .filter(RoomRegistration.user_id == user_id)
        .order_by(RoomRegistration.registered_at.desc())
        .all()
    )


def get_room_registrations(db: Session, room_id: str) -> List[RoomRegistration]:
    _get_room_or_404(db, room_id)
    return (
        db.query(RoomRegistration)
        .filter(RoomRegistration.room_id == room_id)
        .order_by(RoomRegistration.registered_at.asc())
        .all()
    )


def _active_participant(db: Session, room_id: str, user_id: str) -> Optional[RoomParticipant]:
    return (
        db.query(RoomParticipant)
        .filter(
            RoomParticipant.room_id == room_id,
            RoomParticipant.user_id == user_id,
            RoomParticipant.left_at.is_(None),
        )
        .first()
    )


def join_room(db: Session, room_id: str, user: User) -> RoomParticipant:
    """
    Mark the user as present. Hosts and admins may always join; everyone
    else must be registered. Joining twice returns the active row.
    """
    room = _get_room_or_404(db, room_id)
    if room.status not in OPEN_STATUSES:
        raise ConflictError(f"Room is {room.status}")

    active = _active_participant(db, room.id, user.id)
    if active:
        return active

    if not _can_manage(room, user):
        registered = (
            db.query(RoomRegistration)
            .filter(RoomRegistration.room_id == room.id, RoomRegistration.user_id == user.id)
            .first()
        )
        if not registered:
            raise PermissionDeniedError("Register for this Room before joining")

    participant = RoomParticipant(
        room_id=room.id,
        user_id=user.id,
        role="host" if room.host_id == user.id else "participant",
    )
    db.add(participant)
    db.commit()
    db.refresh(participant)

    logger.info(f"Room joined: room_id={room.id}, user_id={user.id}")
    return participant


def leave_room(db: Session, room_id: str, user_id: str) -> Optional[RoomParticipant]:
    participant = _active_participant(db, room_id, user_id)
    if not participant:
        logger.warning(f"No active participant record: room_id={room_id}, user_id={user_id}")
        return None

    participant.left_at = utcnow()
    db.commit()
    db.refresh(participant)
    logger.info(f"Room left: room_id={room_id}, user_id={user_id}")
    return participant


def get_room_participants(db: Session, room_id: str) -> List[RoomParticipant]:
    """Participants currently in the room."""
    return (
        db.query(RoomParticipant)
        .filter(RoomParticipant.room_id == room_id, RoomParticipant.left_at.is_(None))
        .order_by(RoomParticipant.joined_at.asc())
        .all()
    )


def get_user_active_rooms(db: Session, user_id: str) -> List[str]:
    rows = (
        db.query(RoomParticipant.room_id)
        .filter(RoomParticipant.user_id == user_id, RoomParticipant.left_at.is_(None))
        .all()
    )
    return [room_id for (room_id,) in rows]
