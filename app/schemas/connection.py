"""
Pydantic schemas for connection requests and notifications.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field


class ConnectionRequestCreate(BaseModel):
    to_user_id: str = Field(..., min_length=1)
    message: Optional[str] = Field(None, max_length=1000)


class ConnectionRequestResponse(BaseModel):
    id: str
    from_user_id: str
    to_user_id: str
    status: str
    message: str = ""
    created_at: datetime
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ConnectionStatusResponse(BaseModel):
    user_id: str
    status: str = Field(..., description="connected | pending_sent | pending_received | none")
    request_id: Optional[str] = None


class NotificationResponse(BaseModel):
    id: str
    user_id: str
    type: str
    title: str
    message: str
    related_id: Optional[str] = None
    read: bool
    created_at: datetime

    class Config:
        from_attributes = True


class NotificationListResponse(BaseModel):
    notifications: List[NotificationResponse]
    unread_count: int
