"""
Pydantic schemas for Google Meet link creation.
"""
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class MeetRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=300)
    description: Optional[str] = ""
    start_time: datetime
    end_time: datetime


class MeetResponse(BaseModel):
    meet_link: Optional[str] = None
    event_id: str
