"""
Room models - scheduled networking / video events and who signed up for them.
"""
from sqlalchemy import Column, Integer, String, DateTime, Text, Boolean, ForeignKey, JSON, Index, UniqueConstraint
from sqlalchemy.orm import relationship
from app.db.base import Base, generate_id, utcnow


class Room(Base):
    __tablename__ = "rooms"

    id = Column(String(36), primary_key=True, default=generate_id)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    host_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)

    capacity = Column(Integer, nullable=False)
    current_participants = Column(Integer, nullable=False, default=0)
    status = Column(String, nullable=False, default="scheduled", index=True)  # scheduled | live | completed | cancelled
    room_type = Column(String, nullable=False, default="networking", index=True)  # networking | showcase | workshop | pitch | coworking
    is_private = Column(Boolean, nullable=False, default=False)
    access_code = Column(String, nullable=True)

    scheduled_start = Column(DateTime(timezone=True), nullable=False, index=True)
    scheduled_end = Column(DateTime(timezone=True), nullable=False)
    meeting_link = Column(String, nullable=True)
    calendar_event_id = Column(String, nullable=True)
    recording_url = Column(String, nullable=True)
    tags = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    host = relationship("User")
    registrations = relationship("RoomRegistration", back_populates="room", cascade="all, delete-orphan")
    participants = relationship("RoomParticipant", back_populates="room", cascade="all, delete-orphan")

    @property
    def host_name(self):
        return self.host.name if self.host else None

    @property
    def is_full(self) -> bool:
        return self.current_participants >= self.capacity


class RoomRegistration(Base):
    __tablename__ = "room_registrations"

    id = Column(String(36), primary_key=True, default=generate_id)
    room_id = Column(String(36), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    registered_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    room = relationship("Room", back_populates="registrations")

    __table_args__ = (
        UniqueConstraint("room_id", "user_id", name="uq_room_registration"),
    )


class RoomParticipant(Base):
    """Live presence in a room. A row is active while left_at is NULL."""
    __tablename__ = "room_participants"

    id = Column(String(36), primary_key=True, default=generate_id)
    room_id = Column(String(36), ForeignKey("rooms.id", ondelete="CASCADE"), nullable=False)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    role = Column(String, nullable=False, default="participant")  # host | moderator | participant | observer
    joined_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    left_at = Column(DateTime(timezone=True), nullable=True)

    room = relationship("Room", back_populates="participants")
    user = relationship("User")

    __table_args__ = (
        Index("idx_room_participant_active", "room_id", "user_id", "left_at"),
    )

    @property
    def user_name(self):
        return self.user.name if self.user else None

    @property
    def user_photo(self):
        return self.user.photo_url if self.user else None
