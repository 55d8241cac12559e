"""
Room endpoints: browse, host, register and join.
"""
from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user
from app.core.exceptions import raise_http_error
from app.db.models.user import User
from app.schemas.room import (
    RoomCreate,
    RoomUpdate,
    RoomResponse,
    RoomRegistrationRequest,
    RoomRegistrationResponse,
    RoomParticipantResponse,
)
from app.services import room_service

router = APIRouter(prefix="/rooms", tags=["Rooms"])


@router.post("", status_code=status.HTTP_201_CREATED, response_model=RoomResponse)
def create_room(payload: RoomCreate, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    room_data = payload.model_dump(exclude={"create_meet_link"})
    room = room_service.create_room(db, user, room_data, create_meet_link=payload.create_meet_link)
    return RoomResponse.model_validate(room)


@router.get("", response_model=List[RoomResponse])
def list_rooms(
    room_type: Optional[str] = Query(None),
    status_filter: Optional[str] = Query(None, alias="status"),
    host_id: Optional[str] = Query(None),
    tags: Optional[str] = Query(None, description="Comma-separated list of tags (any match)"),
    start: Optional[datetime] = Query(None, description="Earliest scheduled_start"),
    end: Optional[datetime] = Query(None, description="Latest scheduled_start"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    tag_list = [tag.strip() for tag in tags.split(",") if tag.strip()] if tags else None
    rooms = room_service.list_rooms(
        db,
        room_type=room_type,
        status=status_filter,
        host_id=host_id,
        tags=tag_list,
        start=start,
        end=end,
    )
    return [RoomResponse.model_validate(room) for room in rooms]


@router.get("/recommendations", response_model=List[RoomResponse])
def recommended_rooms(
    interests: Optional[str] = Query(None, description="Comma-separated interests; defaults to the profile's"),
    limit: int = Query(5, ge=1, le=20),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    wanted = [i.strip() for i in interests.split(",") if i.strip()] if interests else (user.interests or [])
    rooms = room_service.get_event_recommendations(db, wanted, limit=limit)
    return [RoomResponse.model_validate(room) for room in rooms]


@router.get("/me/registrations", response_model=List[RoomRegistrationResponse])
def my_registrations(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [RoomRegistrationResponse.model_validate(r) for r in room_service.get_user_registrations(db, user.id)]


@router.get("/me/active")
def my_active_rooms(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"room_ids": room_service.get_user_active_rooms(db, user.id)}


@router.get("/{room_id}", response_model=RoomResponse)
def get_room(room_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    room = room_service.get_room(db, room_id)
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    return RoomResponse.model_validate(room)


@router.patch("/{room_id}", response_model=RoomResponse)
def update_room(
    room_id: str,
    payload: RoomUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        room = room_service.update_room(db, room_id, user, payload.model_dump(exclude_unset=True))
    except ValueError as e:
        raise_http_error(e)
    return RoomResponse.model_validate(room)


@router.delete("/{room_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_room(room_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        room_service.delete_room(db, room_id, user)
    except ValueError as e:
        raise_http_error(e)


@router.post("/{room_id}/register", status_code=status.HTTP_201_CREATED, response_model=RoomRegistrationResponse)
def register(
    room_id: str,
    payload: Optional[RoomRegistrationRequest] = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    access_code = payload.access_code if payload else None
    try:
        registration = room_service.register_for_room(db, room_id, user, access_code=access_code)
    except ValueError as e:
        raise_http_error(e)
    return RoomRegistrationResponse.model_validate(registration)


@router.delete("/{room_id}/register", status_code=status.HTTP_204_NO_CONTENT)
def unregister(room_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        room_service.unregister_from_room(db, room_id, user)
    except ValueError as e:
        raise_http_error(e)


@router.get("/{room_id}/registrations", response_model=List[RoomRegistrationResponse])
def room_registrations(room_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    room = room_service.get_room(db, room_id)
    if not room:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Room not found")
    if user.role != "admin" and room.host_id != user.id:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Only the host or an admin can view registrations")
    return [RoomRegistrationResponse.model_validate(r) for r in room_service.get_room_registrations(db, room_id)]


@router.post("/{room_id}/join", response_model=RoomParticipantResponse)
def join(room_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        participant = room_service.join_room(db, room_id, user)
    except ValueError as e:
        raise_http_error(e)
    return RoomParticipantResponse.model_validate(participant)


@router.post("/{room_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
def leave(room_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    room_service.leave_room(db, room_id, user.id)


@router.get("/{room_id}/participants", response_model=List[RoomParticipantResponse])
def participants(room_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return [RoomParticipantResponse.model_validate(p) for p in room_service.get_room_participants(db, room_id)]
