"""
Database models module.

This module imports all database models to ensure they are registered with SQLAlchemy's Base.metadata
before table creation.

All models must be imported here to be included in database migrations and table creation.
"""
from app.db.models.user import User
from app.db.models.subscription import Subscription
from app.db.models.connection_request import ConnectionRequest
from app.db.models.notification import Notification
from app.db.models.chat import Chat, Message
from app.db.models.room import Room, RoomRegistration, RoomParticipant

__all__ = [
    "User",
    "Subscription",
    "ConnectionRequest",
    "Notification",
    "Chat",
    "Message",
    "Room",
    "RoomRegistration",
    "RoomParticipant",
]
