"""
Direct message endpoints.

Writes push a `chat` event to both participants over the change channel
(see realtime.py); clients refetch the chat list and open thread.
"""
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user
from app.core.exceptions import raise_http_error
from app.core.rate_limit import user_rate_limit
from app.db.models.user import User
from app.schemas.message import ChatResponse, MessageCreate, MessageResponse
from app.services import message_service
from app.services.socket_manager import manager

router = APIRouter(prefix="/messages", tags=["Messages"])


@router.post(
    "",
    status_code=status.HTTP_201_CREATED,
    response_model=MessageResponse,
    dependencies=[Depends(user_rate_limit("messages", max_requests=60))],
)
def send_message(
    payload: MessageCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        message = message_service.send_message(db, user.id, payload.receiver_id, payload.content)
    except ValueError as e:
        raise_http_error(e)
    background_tasks.add_task(
        manager.publish,
        [message.sender_id, message.receiver_id],
        {"type": "chat", "chat_id": message.chat_id, "message_id": message.id},
    )
    return MessageResponse.model_validate(message)


@router.get("/chats", response_model=List[ChatResponse])
def list_chats(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    chats = message_service.get_user_chats(db, user.id)
    return [
        ChatResponse(
            id=chat["id"],
            participants=chat["participants"],
            updated_at=chat["updated_at"],
            last_message=MessageResponse.model_validate(chat["last_message"]) if chat["last_message"] else None,
            unread_count=chat["unread_count"],
        )
        for chat in chats
    ]


@router.get("/chats/{chat_id}", response_model=List[MessageResponse])
def chat_messages(chat_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    try:
        messages = message_service.get_chat_messages(db, chat_id, user.id)
    except ValueError as e:
        raise_http_error(e)
    return [MessageResponse.model_validate(m) for m in messages]


@router.post("/chats/{chat_id}/read")
def mark_chat_read(
    chat_id: str,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        updated = message_service.mark_chat_as_read(db, chat_id, user.id)
    except ValueError as e:
        raise_http_error(e)
    background_tasks.add_task(manager.publish, [user.id], {"type": "chat", "chat_id": chat_id})
    return {"updated": updated}


@router.post("/{message_id}/read", response_model=MessageResponse)
def mark_message_read(
    message_id: str,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        message = message_service.mark_as_read(db, message_id, user.id)
    except ValueError as e:
        raise_http_error(e)
    background_tasks.add_task(
        manager.publish,
        [message.sender_id, message.receiver_id],
        {"type": "chat", "chat_id": message.chat_id, "message_id": message.id},
    )
    return MessageResponse.model_validate(message)
