from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user
from app.core.exceptions import raise_http_error
from app.db.models.user import User
from app.schemas.connection import NotificationListResponse, NotificationResponse
from app.services import notification_service

router = APIRouter(prefix="/notifications", tags=["Notifications"])


@router.get("", response_model=NotificationListResponse)
def list_notifications(
    limit: int = Query(100, ge=1, le=500),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    notifications = notification_service.get_user_notifications(db, user.id, limit=limit)
    return NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in notifications],
        unread_count=notification_service.get_unread_count(db, user.id),
    )


@router.get("/unread-count")
def unread_count(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"unread_count": notification_service.get_unread_count(db, user.id)}


@router.post("/read-all")
def mark_all_read(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return {"updated": notification_service.mark_all_as_read(db, user.id)}


@router.post("/{notification_id}/read", response_model=NotificationResponse)
def mark_read(notification_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        notification = notification_service.mark_notification_as_read(db, notification_id, user.id)
    except ValueError as e:
        raise_http_error(e)
    return NotificationResponse.model_validate(notification)
