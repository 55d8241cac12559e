"""
Pydantic schemas for chats and messages.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field


class MessageCreate(BaseModel):
    receiver_id: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, max_length=5000)


class MessageResponse(BaseModel):
    id: str
    chat_id: str
    sender_id: str
    receiver_id: str
    content: str
    timestamp: datetime
    read: bool

    class Config:
        from_attributes = True


class ChatResponse(BaseModel):
    id: str
    participants: List[str]
    updated_at: datetime
    last_message: Optional[MessageResponse] = None
    unread_count: int = 0
