from sqlalchemy import Column, String, DateTime, Text, Boolean, Integer, JSON
from sqlalchemy.orm import relationship
from app.db.base import Base, generate_id, utcnow


class User(Base):
    """
    Local profile mirror for an authenticated account.

    `connections` holds the ids of connected users. The list is maintained
    on both sides of every connection; always assign a new list instead of
    mutating it in place so SQLAlchemy notices the change.
    """
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=generate_id)
    email = Column(String, unique=True, index=True, nullable=False)
    name = Column(String, nullable=False, default="")
    password_hash = Column(String, nullable=True)  # None for OAuth-only accounts
    auth_provider = Column(String, nullable=False, default="password")  # password | google | linkedin
    role = Column(String, nullable=False, default="user", index=True)  # user | admin
    photo_url = Column(String, nullable=True)

    # Profile
    title = Column(String, nullable=True)
    company = Column(String, nullable=True)
    location = Column(String, nullable=True)
    about = Column(Text, nullable=True)
    skills = Column(JSON, nullable=False, default=list)
    onboarding_completed = Column(Boolean, nullable=False, default=False)

    # Onboarding questionnaire
    years_experience = Column(Integer, nullable=True)
    experience_level = Column(String, nullable=True)  # entry | mid | senior | executive
    industry = Column(String, nullable=True)
    company_size = Column(String, nullable=True)
    specializations = Column(JSON, nullable=True, default=list)
    primary_goal = Column(String, nullable=True)
    networking_style = Column(String, nullable=True)
    communication_preference = Column(String, nullable=True)
    interests = Column(JSON, nullable=True, default=list)
    event_preferences = Column(JSON, nullable=True, default=list)
    availability = Column(String, nullable=True)
    time_zone = Column(String, nullable=True)
    preferred_meeting_times = Column(JSON, nullable=True, default=list)
    assigned_role = Column(String, nullable=True)
    onboarding_completed_at = Column(DateTime(timezone=True), nullable=True)

    connections = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    subscription = relationship(
        "Subscription",
        back_populates="user",
        uselist=False,
        cascade="all, delete-orphan",
    )

    def __repr__(self):
        return f"<User(id={self.id}, email='{self.email}', role='{self.role}')>"
