"""
Pydantic schemas for Rooms, registrations and live participants.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field, model_validator

ROOM_TYPE_PATTERN = "^(networking|showcase|workshop|pitch|coworking)$"
ROOM_STATUS_PATTERN = "^(scheduled|live|completed|cancelled)$"


class RoomBase(BaseModel):
    name: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=5000)
    capacity: int = Field(..., ge=1, le=10000)
    room_type: str = Field("networking", pattern=ROOM_TYPE_PATTERN)
    is_private: bool = False
    access_code: Optional[str] = Field(None, max_length=64)
    scheduled_start: datetime
    scheduled_end: datetime
    meeting_link: Optional[str] = None
    tags: List[str] = []


class RoomCreate(RoomBase):
    create_meet_link: bool = Field(False, description="Mint a Google Meet link for this room")

    @model_validator(mode="after")
    def check_schedule(self):
        if self.scheduled_end <= self.scheduled_start:
            raise ValueError("scheduled_end must be after scheduled_start")
        if self.is_private and not self.access_code:
            raise ValueError("Private rooms need an access_code")
        return self

    class Config:
        json_schema_extra = {
            "example": {
                "name": "Founder Friday",
                "description": "Speed networking for pre-seed founders",
                "capacity": 40,
                "room_type": "networking",
                "scheduled_start": "2026-11-06T17:00:00Z",
                "scheduled_end": "2026-11-06T18:00:00Z",
                "tags": ["fundraising", "saas"],
                "create_meet_link": True
            }
        }


class RoomUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    capacity: Optional[int] = Field(None, ge=1, le=10000)
    status: Optional[str] = Field(None, pattern=ROOM_STATUS_PATTERN)
    room_type: Optional[str] = Field(None, pattern=ROOM_TYPE_PATTERN)
    is_private: Optional[bool] = None
    access_code: Optional[str] = Field(None, max_length=64)
    scheduled_start: Optional[datetime] = None
    scheduled_end: Optional[datetime] = None
    meeting_link: Optional[str] = None
    recording_url: Optional[str] = None
    tags: Optional[List[str]] = None


class RoomResponse(BaseModel):
    id: str
    name: str
    description: str
    host_id: str
    host_name: Optional[str] = None
    capacity: int
    current_participants: int
    status: str
    room_type: str
    is_private: bool
    scheduled_start: datetime
    scheduled_end: datetime
    meeting_link: Optional[str] = None
    recording_url: Optional[str] = None
    tags: List[str] = []
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class RoomRegistrationRequest(BaseModel):
    access_code: Optional[str] = None


class RoomRegistrationResponse(BaseModel):
    id: str
    room_id: str
    user_id: str
    registered_at: datetime

    class Config:
        from_attributes = True


class RoomParticipantResponse(BaseModel):
    id: str
    room_id: str
    user_id: str
    user_name: Optional[str] = None
    user_photo: Optional[str] = None
    role: str
    joined_at: datetime
    left_at: Optional[datetime] = None

    class Config:
        from_attributes = True
