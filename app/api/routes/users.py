"""
Profile endpoints for the signed-in user, plus admin user management.
"""
import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user, require_admin
from app.core.exceptions import raise_http_error
from app.db.models.user import User
from app.schemas.user import (
    UserResponse,
    NetworkProfileResponse,
    ProfileUpdate,
    RoleUpdate,
    OnboardingRequest,
    OnboardingResponse,
    AssignedRoleUpdate,
)
from app.services import auth_service, onboarding_service
from app.services.quota_service import get_usage_for_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/users", tags=["Users"])


@router.get("/me", response_model=UserResponse)
def get_me(user: User = Depends(get_current_user)):
    return UserResponse.model_validate(user)


@router.patch("/me", response_model=UserResponse)
def update_me(
    updates: ProfileUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    user = auth_service.update_profile(db, user, updates.model_dump(exclude_unset=True))
    return UserResponse.model_validate(user)


@router.post("/me/onboarding", response_model=OnboardingResponse)
def complete_onboarding(
    answers: OnboardingRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Save the onboarding questionnaire, assign a networking role and return
    suggestions for that role.
    """
    payload = answers.model_dump(exclude_unset=True)
    user = onboarding_service.complete_onboarding(db, user, payload)
    recommendations = onboarding_service.generate_recommendations(
        {"interests": user.interests}, user.assigned_role
    )
    return OnboardingResponse(
        user=UserResponse.model_validate(user),
        assigned_role=user.assigned_role,
        recommendations=recommendations,
    )


@router.patch("/me/assigned-role", response_model=UserResponse)
def change_assigned_role(
    payload: AssignedRoleUpdate,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        user = onboarding_service.update_assigned_role(db, user.id, payload.assigned_role)
    except ValueError as e:
        raise_http_error(e)
    return UserResponse.model_validate(user)


@router.get("/me/subscription")
def get_my_subscription(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    """
    Subscription status and remaining Room registrations for this period.
    """
    return get_usage_for_response(db, user.id)


@router.get("", response_model=List[UserResponse])
def list_users(
    role: Optional[str] = Query(None, pattern="^(user|admin)$"),
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=200),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    users = auth_service.list_users(db, role=role, limit=page_size, offset=(page - 1) * page_size)
    return [UserResponse.model_validate(u) for u in users]


@router.patch("/{user_id}/role", response_model=UserResponse)
def change_role(
    user_id: str,
    payload: RoleUpdate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db)
):
    try:
        user = auth_service.set_role(db, user_id, payload.role)
    except ValueError as e:
        raise_http_error(e)
    logger.info(f"Admin {admin.id} set role={payload.role} on user_id={user_id}")
    return UserResponse.model_validate(user)


@router.get("/{user_id}", response_model=NetworkProfileResponse)
def get_profile(user_id: str, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    profile = auth_service.get_user(db, user_id)
    if not profile:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return NetworkProfileResponse.model_validate(profile)
