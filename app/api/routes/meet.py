from fastapi import APIRouter, Depends

from app.core.auth_dependency import get_current_user
from app.core.exceptions import raise_http_error
from app.db.models.user import User
from app.schemas.meet import MeetRequest, MeetResponse
from app.services import meet_service

router = APIRouter(tags=["Meet"])


@router.post("/create-meet", response_model=MeetResponse)
def create_meet(payload: MeetRequest, user: User = Depends(get_current_user)):
    try:
        meet = meet_service.create_meet_link(
            title=payload.title,
            description=payload.description,
            start_time=payload.start_time,
            end_time=payload.end_time,
        )
    except ValueError as e:
        raise_http_error(e)
    return MeetResponse(**meet)
