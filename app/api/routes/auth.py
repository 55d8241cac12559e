from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, status
from fastapi.security import OAuth2PasswordRequestForm
from sqlalchemy.orm import Session

from app.core import config
from app.core.auth_dependency import get_db
from app.core.exceptions import raise_http_error
from app.core.rate_limit import auth_rate_limit
from app.core.security import create_access_token
from app.db.models.user import User
from app.schemas.auth import SignupRequest, LoginRequest, OAuthSyncRequest, TokenResponse
from app.schemas.user import UserResponse
from app.services import auth_service

router = APIRouter(prefix="/auth", tags=["Auth"])


def _token_response(user: User) -> TokenResponse:
    return TokenResponse(
        access_token=create_access_token({"sub": user.id}),
        token_type="bearer",
        redirect_to=auth_service.post_login_redirect(user),
        user=UserResponse.model_validate(user),
    )


# ✅ USER SIGNUP
@router.post(
    "/signup",
    status_code=status.HTTP_201_CREATED,
    response_model=TokenResponse,
    dependencies=[Depends(auth_rate_limit)],
)
def signup(payload: SignupRequest, db: Session = Depends(get_db)):
    try:
        user = auth_service.signup(db, payload.email, payload.password, payload.name)
    except ValueError as e:
        raise_http_error(e)
    return _token_response(user)


# ✅ OAUTH2 LOGIN (form fields: username = email, password)
@router.post("/login", response_model=TokenResponse, dependencies=[Depends(auth_rate_limit)])
def login(form_data: OAuth2PasswordRequestForm = Depends(), db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, form_data.username, form_data.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _token_response(user)


@router.post("/login/json", response_model=TokenResponse, dependencies=[Depends(auth_rate_limit)])
def login_json(payload: LoginRequest, db: Session = Depends(get_db)):
    user = auth_service.authenticate(db, payload.email, payload.password)
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return _token_response(user)


# ✅ OAUTH CALLBACK PROFILE MIRROR (server-to-server)
@router.post("/oauth/sync", response_model=TokenResponse)
def oauth_sync(
    payload: OAuthSyncRequest,
    x_sync_secret: Optional[str] = Header(None),
    db: Session = Depends(get_db)
):
    if not config.OAUTH_SYNC_SECRET:
        raise HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail="OAuth sync not configured")
    if x_sync_secret != config.OAUTH_SYNC_SECRET:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid sync secret")

    user = auth_service.sync_oauth_user(
        db,
        email=payload.email,
        name=payload.name,
        photo_url=payload.photo_url,
        provider=payload.provider,
    )
    return _token_response(user)
