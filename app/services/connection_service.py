"""
Connection service.

Drives connection requests through pending -> accepted | rejected (or
deletion on cancel) and keeps the mutual `users.connections` lists in step.
"""
import logging
from typing import List, Optional

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, NotFoundError, PermissionDeniedError
from app.db.base import utcnow
from app.db.models.connection_request import ConnectionRequest
from app.db.models.user import User
from app.services.notification_service import create_notification

logger = logging.getLogger(__name__)

CONNECTED = "connected"
PENDING_SENT = "pending_sent"
PENDING_RECEIVED = "pending_received"
NONE = "none"


def _add_connection(user: User, other_id: str) -> None:
    connections = list(user.connections or [])
    if other_id not in connections:
        connections.append(other_id)
    user.connections = connections


def _drop_connection(user: User, other_id: str) -> None:
    user.connections = [cid for cid in (user.connections or []) if cid != other_id]


def _get_request_or_404(db: Session, request_id: str) -> ConnectionRequest:
    request = get_connection_request(db, request_id)
    if not request:
        raise NotFoundError("Connection request not found")
    return request


def get_connection_request(db: Session, request_id: str) -> Optional[ConnectionRequest]:
    return db.query(ConnectionRequest).filter(ConnectionRequest.id == request_id).first()


def get_connection_request_between_users(db: Session, user_id_1: str, user_id_2: str) -> Optional[ConnectionRequest]:
    """Any request between the pair, in either direction."""
    if not user_id_1 or not user_id_2:
        return None
    return (
        db.query(ConnectionRequest)
        .filter(
            or_(
                and_(ConnectionRequest.from_user_id == user_id_1, ConnectionRequest.to_user_id == user_id_2),
                and_(ConnectionRequest.from_user_id == user_id_2, ConnectionRequest.to_user_id == user_id_1),
            )
        )
        .order_by(ConnectionRequest.created_at.desc())
        .first()
    )


def are_users_connected(db: Session, user_id_1: str, user_id_2: str) -> bool:
    """Symmetric check: each user must list the other."""
    if not user_id_1 or not user_id_2:
        return False
    user_1 = db.query(User).filter(User.id == user_id_1).first()
    user_2 = db.query(User).filter(User.id == user_id_2).first()
    if not user_1 or not user_2:
        return False
    return user_id_2 in (user_1.connections or []) and user_id_1 in (user_2.connections or [])


def get_connection_status(db: Session, user_id_1: str, user_id_2: str) -> str:
    """
    Relationship of user 1 towards user 2.
    
    Returns:
        connected | pending_sent | pending_received | none
    """
    if not user_id_1 or not user_id_2:
        return NONE

    if are_users_connected(db, user_id_1, user_id_2):
        return CONNECTED

    request = get_connection_request_between_users(db, user_id_1, user_id_2)
    if request and request.status == "pending":
        return PENDING_SENT if request.from_user_id == user_id_1 else PENDING_RECEIVED

    return NONE


def send_connection_request(db: Session, from_user_id: str, to_user_id: str, message: Optional[str] = None) -> ConnectionRequest:
    """
    Create a pending request and notify the recipient.
    
    Raises:
        ValueError: Missing ids or a request to yourself
        NotFoundError: Recipient does not exist
        ConflictError: A request already exists or the users are connected
    """
    if not from_user_id or not to_user_id:
        raise ValueError("Both from_user_id and to_user_id are required")

    if from_user_id == to_user_id:
        raise ValueError("Cannot send connection request to yourself")

    sender = db.query(User).filter(User.id == from_user_id).first()
    recipient = db.query(User).filter(User.id == to_user_id).first()
    if not sender or not recipient:
        raise NotFoundError("User not found")

    if get_connection_request_between_users(db, from_user_id, to_user_id):
        raise ConflictError("A connection request already exists between these users")

    if are_users_connected(db, from_user_id, to_user_id):
        raise ConflictError("Users are already connected")

    request = ConnectionRequest(
        from_user_id=from_user_id,
        to_user_id=to_user_id,
        status="pending",
        message=message or "",
    )
    db.add(request)
    db.commit()
    db.refresh(request)

    logger.info(f"Connection request sent: request_id={request.id}, from={from_user_id}, to={to_user_id}")

    create_notification(
        db,
        user_id=to_user_id,
        type="connection_request",
        title="New Connection Request",
        message=f"{sender.name or 'Someone'} wants to connect with you",
        related_id=request.id,
    )
    return request


def accept_connection_request(db: Session, request_id: str, acting_user_id: str) -> ConnectionRequest:
    """Recipient accepts: both users gain each other as a connection."""
    request = _get_request_or_404(db, request_id)

    if request.to_user_id != acting_user_id:
        raise PermissionDeniedError("Only the recipient can accept this request")

    if request.status != "pending":
        raise ConflictError("Connection request has already been processed")

    from_user = db.query(User).filter(User.id == request.from_user_id).first()
    to_user = db.query(User).filter(User.id == request.to_user_id).first()
    if not from_user or not to_user:
        raise NotFoundError("User not found")

    request.status = "accepted"
    request.updated_at = utcnow()
    _add_connection(from_user, to_user.id)
    _add_connection(to_user, from_user.id)
    db.commit()
    db.refresh(request)

    logger.info(f"Connection request accepted: request_id={request.id}")

    create_notification(
        db,
        user_id=from_user.id,
        type="connection_accepted",
        title="Connection Request Accepted",
        message=f"{to_user.name or 'Someone'} accepted your connection request",
        related_id=to_user.id,
    )
    return request


def reject_connection_request(db: Session, request_id: str, acting_user_id: str) -> ConnectionRequest:
    request = _get_request_or_404(db, request_id)

    if request.to_user_id != acting_user_id:
        raise PermissionDeniedError("Only the recipient can reject this request")

    if request.status != "pending":
        raise ConflictError("Connection request has already been processed")

    request.status = "rejected"
    request.updated_at = utcnow()
    db.commit()
    db.refresh(request)

    logger.info(f"Connection request rejected: request_id={request.id}")
    return request


def cancel_connection_request(db: Session, request_id: str, acting_user_id: str) -> None:
    """Sender withdraws a pending request; the row is deleted."""
    request = _get_request_or_404(db, request_id)

    if request.from_user_id != acting_user_id:
        raise PermissionDeniedError("Only the sender can cancel this request")

    if request.status != "pending":
        raise ConflictError("Connection request has already been processed")

    db.delete(request)
    db.commit()
    logger.info(f"Connection request cancelled: request_id={request_id}")


def remove_connection(db: Session, user_id: str, connection_id: str) -> None:
    """
    Disconnect two users.
    
    The accepted request between them is deleted too, otherwise neither side
    could ever send a new request.
    """
    user = db.query(User).filter(User.id == user_id).first()
    other = db.query(User).filter(User.id == connection_id).first()
    if not user or not other:
        raise NotFoundError("User not found")

    _drop_connection(user, other.id)
    _drop_connection(other, user.id)

    (
        db.query(ConnectionRequest)
        .filter(
            ConnectionRequest.status == "accepted",
            or_(
                and_(ConnectionRequest.from_user_id == user_id, ConnectionRequest.to_user_id == connection_id),
                and_(ConnectionRequest.from_user_id == connection_id, ConnectionRequest.to_user_id == user_id),
            ),
        )
        .delete(synchronize_session=False)
    )
    db.commit()
    logger.info(f"Connection removed: user_id={user_id}, connection_id={connection_id}")


def get_pending_connection_requests(db: Session, user_id: str) -> List[ConnectionRequest]:
    """Pending requests the user sent or received, newest first."""
    return (
        db.query(ConnectionRequest)
        .filter(
            ConnectionRequest.status == "pending",
            or_(ConnectionRequest.from_user_id == user_id, ConnectionRequest.to_user_id == user_id),
        )
        .order_by(ConnectionRequest.created_at.desc())
        .all()
    )


def get_incoming_connection_requests(db: Session, user_id: str) -> List[ConnectionRequest]:
    return (
        db.query(ConnectionRequest)
        .filter(ConnectionRequest.to_user_id == user_id, ConnectionRequest.status == "pending")
        .order_by(ConnectionRequest.created_at.desc())
        .all()
    )


def get_outgoing_connection_requests(db: Session, user_id: str) -> List[ConnectionRequest]:
    return (
        db.query(ConnectionRequest)
        .filter(ConnectionRequest.from_user_id == user_id, ConnectionRequest.status == "pending")
        .order_by(ConnectionRequest.created_at.desc())
        .all()
    )
