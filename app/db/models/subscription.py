from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship
from app.db.base import Base, utcnow


class Subscription(Base):
    __tablename__ = "subscriptions"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)

    status = Column(String, nullable=False, default="trial")  # trial | active | inactive
    plan = Column(String, nullable=True)  # starter | professional | team | enterprise
    trial_ends_at = Column(DateTime(timezone=True), nullable=True)
    events_quota = Column(Integer, nullable=False, default=0)
    events_used = Column(Integer, nullable=False, default=0)

    stripe_customer_id = Column(String, nullable=True, index=True)
    stripe_subscription_id = Column(String, nullable=True)
    stripe_price_id = Column(String, nullable=True)
    current_period_start = Column(DateTime(timezone=True), nullable=True)
    current_period_end = Column(DateTime(timezone=True), nullable=True)

    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    user = relationship("User", back_populates="subscription")

    @property
    def events_remaining(self) -> int:
        return max(0, (self.events_quota or 0) - (self.events_used or 0))
