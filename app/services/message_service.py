"""
Direct messaging between two members.

A chat is keyed by the sorted pair of participant ids, so both sides of a
conversation always land in the same thread.
"""
import logging
from typing import List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, PermissionDeniedError
from app.db.base import utcnow
from app.db.models.chat import Chat, Message
from app.db.models.user import User

logger = logging.getLogger(__name__)


def chat_id_for(user_id_1: str, user_id_2: str) -> str:
    return "_".join(sorted([user_id_1, user_id_2]))


def get_chat(db: Session, chat_id: str) -> Optional[Chat]:
    return db.query(Chat).filter(Chat.id == chat_id).first()


def _get_chat_for_participant(db: Session, chat_id: str, user_id: str) -> Chat:
    chat = get_chat(db, chat_id)
    if not chat:
        raise NotFoundError("Chat not found")
    if user_id not in (chat.participants or []):
        raise PermissionDeniedError("Not a participant of this chat")
    return chat


def send_message(db: Session, sender_id: str, receiver_id: str, content: str) -> Message:
    """
    Store a message, creating the chat on first contact.
    
    Raises:
        ValueError: Empty content or a message to yourself
        NotFoundError: Receiver does not exist
    """
    content = (content or "").strip()
    if not content:
        raise ValueError("Message content cannot be empty")

    if sender_id == receiver_id:
        raise ValueError("Cannot send a message to yourself")

    if not db.query(User).filter(User.id == receiver_id).first():
        raise NotFoundError("Receiver not found")

    chat_id = chat_id_for(sender_id, receiver_id)
    now = utcnow()

    chat = get_chat(db, chat_id)
    if chat is None:
        user_a_id, user_b_id = sorted([sender_id, receiver_id])
        chat = Chat(
            id=chat_id,
            participants=[sender_id, receiver_id],
            user_a_id=user_a_id,
            user_b_id=user_b_id,
            created_at=now,
        )
        db.add(chat)
    chat.updated_at = now

    message = Message(
        chat_id=chat_id,
        sender_id=sender_id,
        receiver_id=receiver_id,
        content=content,
        timestamp=now,
        read=False,
    )
    db.add(message)
    db.commit()
    db.refresh(message)

    logger.info(f"Message sent: chat_id={chat_id}, message_id={message.id}")
    return message


def get_chat_messages(db: Session, chat_id: str, user_id: str) -> List[Message]:
    """All messages in a chat, oldest first."""
    _get_chat_for_participant(db, chat_id, user_id)
    return (
        db.query(Message)
        .filter(Message.chat_id == chat_id)
        .order_by(Message.timestamp.asc())
        .all()
    )


def mark_as_read(db: Session, message_id: str, user_id: str) -> Message:
    message = db.query(Message).filter(Message.id == message_id).first()
    if not message:
        raise NotFoundError("Message not found")
    if message.receiver_id != user_id:
        raise PermissionDeniedError("Only the receiver can mark a message as read")

    if not message.read:
        message.read = True
        db.commit()
        db.refresh(message)
    return message


def mark_chat_as_read(db: Session, chat_id: str, user_id: str) -> int:
    """Mark every message addressed to the user in this chat. Returns rows changed."""
    _get_chat_for_participant(db, chat_id, user_id)
    updated = (
        db.query(Message)
        .filter(
            Message.chat_id == chat_id,
            Message.receiver_id == user_id,
            Message.read.is_(False),
        )
        .update({Message.read: True}, synchronize_session=False)
    )
    db.commit()
    return updated


def get_user_chats(db: Session, user_id: str) -> List[dict]:
    """
    Chats the user takes part in, most recently active first.
    
    Returns:
        List of dicts with id, participants, updated_at, last_message and
        unread_count (messages addressed to the user that are unread)
    """
    chats = (
        db.query(Chat)
        .filter(or_(Chat.user_a_id == user_id, Chat.user_b_id == user_id))
        .order_by(Chat.updated_at.desc())
        .all()
    )

    results = []
    for chat in chats:
        last_message = (
            db.query(Message)
            .filter(Message.chat_id == chat.id)
            .order_by(Message.timestamp.desc())
            .first()
        )
        unread_count = (
            db.query(Message)
            .filter(
                Message.chat_id == chat.id,
                Message.receiver_id == user_id,
                Message.read.is_(False),
            )
            .count()
        )
        results.append({
            "id": chat.id,
            "participants": list(chat.participants or []),
            "updated_at": chat.updated_at,
            "last_message": last_message,
            "unread_count": unread_count,
        })
    return results
