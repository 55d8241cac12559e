"""
Connection request endpoints.

Every state change pushes a `connections` event to both users so open pages
refetch.
"""
from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user
from app.core.exceptions import raise_http_error
from app.core.rate_limit import user_rate_limit
from app.db.models.user import User
from app.schemas.connection import (
    ConnectionRequestCreate,
    ConnectionRequestResponse,
    ConnectionStatusResponse,
)
from app.services import connection_service
from app.services.socket_manager import manager

router = APIRouter(prefix="/connections", tags=["Connections"])


def _publish(background_tasks: BackgroundTasks, request, *, notify: bool = False):
    background_tasks.add_task(
        manager.publish,
        [request.from_user_id, request.to_user_id],
        {"type": "connections", "request_id": request.id},
    )
    if notify:
        background_tasks.add_task(manager.publish, [request.to_user_id], {"type": "notification"})


def _requests(rows) -> List[ConnectionRequestResponse]:
    return [ConnectionRequestResponse.model_validate(r) for r in rows]


@router.post(
    "/requests",
    status_code=status.HTTP_201_CREATED,
    response_model=ConnectionRequestResponse,
    dependencies=[Depends(user_rate_limit("connection_requests", max_requests=20))],
)
def send_request(
    payload: ConnectionRequestCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        request = connection_service.send_connection_request(db, user.id, payload.to_user_id, payload.message)
    except ValueError as e:
        raise_http_error(e)
    _publish(background_tasks, request, notify=True)
    return ConnectionRequestResponse.model_validate(request)


@router.get("/requests/pending", response_model=List[ConnectionRequestResponse])
def pending_requests(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _requests(connection_service.get_pending_connection_requests(db, user.id))


@router.get("/requests/incoming", response_model=List[ConnectionRequestResponse])
def incoming_requests(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _requests(connection_service.get_incoming_connection_requests(db, user.id))


@router.get("/requests/outgoing", response_model=List[ConnectionRequestResponse])
def outgoing_requests(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _requests(connection_service.get_outgoing_connection_requests(db, user.id))


@router.get("/requests/{request_id}", response_model=ConnectionRequestResponse)
def get_request(request_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    request = connection_service.get_connection_request(db, request_id)
    if not request or user.id not in (request.from_user_id, request.to_user_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Connection request not found")
    return ConnectionRequestResponse.model_validate(request)


@router.post("/requests/{request_id}/accept", response_model=ConnectionRequestResponse)
def accept_request(
    request_id: str,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        request = connection_service.accept_connection_request(db, request_id, user.id)
    except ValueError as e:
        raise_http_error(e)
    _publish(background_tasks, request)
    background_tasks.add_task(manager.publish, [request.from_user_id], {"type": "notification"})
    return ConnectionRequestResponse.model_validate(request)


@router.post("/requests/{request_id}/reject", response_model=ConnectionRequestResponse)
def reject_request(
    request_id: str,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        request = connection_service.reject_connection_request(db, request_id, user.id)
    except ValueError as e:
        raise_http_error(e)
    _publish(background_tasks, request)
    return ConnectionRequestResponse.model_validate(request)


@router.delete("/requests/{request_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_request(
    request_id: str,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    request = connection_service.get_connection_request(db, request_id)
    to_user_id = request.to_user_id if request else None
    try:
        connection_service.cancel_connection_request(db, request_id, user.id)
    except ValueError as e:
        raise_http_error(e)
    background_tasks.add_task(
        manager.publish,
        [user.id, to_user_id],
        {"type": "connections", "request_id": request_id},
    )


@router.get("/status/{other_user_id}", response_model=ConnectionStatusResponse)
def connection_status(other_user_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    status_value = connection_service.get_connection_status(db, user.id, other_user_id)
    request_id = None
    if status_value in (connection_service.PENDING_SENT, connection_service.PENDING_RECEIVED):
        request = connection_service.get_connection_request_between_users(db, user.id, other_user_id)
        request_id = request.id if request else None
    return ConnectionStatusResponse(user_id=other_user_id, status=status_value, request_id=request_id)
