from typing import List

from fastapi import APIRouter, BackgroundTasks, Depends, Query, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user
from app.core.exceptions import raise_http_error
from app.db.models.user import User
from app.schemas.user import NetworkProfileResponse
from app.services import connection_service, network_service
from app.services.socket_manager import manager

router = APIRouter(prefix="/network", tags=["Network"])


def _profiles(users) -> List[NetworkProfileResponse]:
    return [NetworkProfileResponse.model_validate(u) for u in users]


@router.get("/users", response_model=List[NetworkProfileResponse])
def network_users(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _profiles(network_service.get_network_users(db, user.id))


@router.get("/search", response_model=List[NetworkProfileResponse])
def search(
    q: str = Query("", max_length=200, description="Name, company, title or skill"),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    return _profiles(network_service.search_users(db, q, user.id))


@router.get("/recommendations", response_model=List[NetworkProfileResponse])
def recommendations(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _profiles(network_service.get_connection_recommendations(db, user.id, user.skills or []))


@router.get("/connections", response_model=List[NetworkProfileResponse])
def my_connections(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return _profiles(network_service.get_connection_profiles(db, user.id))


@router.delete("/connections/{connection_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_connection(
    connection_id: str,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        connection_service.remove_connection(db, user.id, connection_id)
    except ValueError as e:
        raise_http_error(e)
    background_tasks.add_task(manager.publish, [user.id, connection_id], {"type": "connections"})
