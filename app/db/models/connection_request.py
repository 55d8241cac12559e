from sqlalchemy import Column, String, DateTime, Text, ForeignKey, Index
from sqlalchemy.orm import relationship
from app.db.base import Base, generate_id, utcnow


class ConnectionRequest(Base):
    """
    A request from one user to another to connect.

    status: pending -> accepted | rejected. Cancelled requests are deleted.
    At most one row per unordered user pair is enforced by the connection
    service, not by a constraint.
    """
    __tablename__ = "connection_requests"

    id = Column(String(36), primary_key=True, default=generate_id)
    from_user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    to_user_id = Column(String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    status = Column(String, nullable=False, default="pending", index=True)
    message = Column(Text, nullable=False, default="")

    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False)

    from_user = relationship("User", foreign_keys=[from_user_id])
    to_user = relationship("User", foreign_keys=[to_user_id])

    __table_args__ = (
        Index("idx_connection_request_pair", "from_user_id", "to_user_id"),
    )

    def __repr__(self):
        return f"<ConnectionRequest(id={self.id}, {self.from_user_id}->{self.to_user_id}, status='{self.status}')>"
