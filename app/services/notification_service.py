"""
Notification rows shown in the header bell and on the Notifications page.
"""
import logging
from typing import List, Optional

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.db.models.notification import Notification

logger = logging.getLogger(__name__)

NOTIFICATION_TYPES = (
    "connection_request",
    "connection_accepted",
    "message",
    "event_reminder",
    "system",
)


def create_notification(
    db: Session,
    user_id: str,
    type: str,
    title: str,
    message: str,
    related_id: Optional[str] = None
) -> Optional[Notification]:
    """
    Insert a notification and commit it.
    
    Notifications are a side effect of other workflows, so a failure here is
    logged and rolled back and None is returned instead of raising.
    """
    if type not in NOTIFICATION_TYPES:
        raise ValueError(f"Unknown notification type: {type}")

    try:
        notification = Notification(
            user_id=user_id,
            type=type,
            title=title,
            message=message,
            related_id=related_id,
            read=False,
        )
        db.add(notification)
        db.commit()
        db.refresh(notification)
        logger.debug(f"Notification created: user_id={user_id}, type={type}")
        return notification
    except Exception as e:
        db.rollback()
        logger.error(f"Failed to create {type} notification for user_id={user_id}: {e}", exc_info=True)
        return None


def get_user_notifications(db: Session, user_id: str, limit: int = 100) -> List[Notification]:
    """Most recent first."""
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
        .all()
    )


def get_unread_count(db: Session, user_id: str) -> int:
    return (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .count()
    )


def mark_notification_as_read(db: Session, notification_id: str, user_id: str) -> Notification:
    notification = (
        db.query(Notification)
        .filter(Notification.id == notification_id, Notification.user_id == user_id)
        .first()
    )
    if not notification:
        raise NotFoundError("Notification not found")

    if not notification.read:
        notification.read = True
        db.commit()
        db.refresh(notification)
    return notification


def mark_all_as_read(db: Session, user_id: str) -> int:
    """Returns the number of notifications that changed."""
    updated = (
        db.query(Notification)
        .filter(Notification.user_id == user_id, Notification.read.is_(False))
        .update({Notification.read: True}, synchronize_session=False)
    )
    db.commit()
    logger.debug(f"Marked {updated} notifications read: user_id={user_id}")
    return updated
