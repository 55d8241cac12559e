"""
Account service.

Creates accounts, verifies credentials and keeps the local profile mirror in
sync with whatever the auth provider tells us at login / OAuth callback.
"""
import logging
from datetime import timedelta
from typing import Optional, List

from sqlalchemy.orm import Session

from app.core.config import TRIAL_DAYS, DEFAULT_EVENTS_QUOTA
from app.core.exceptions import ConflictError, NotFoundError
from app.core.security import hash_password, verify_password
from app.db.base import utcnow
from app.db.models.user import User
from app.db.models.subscription import Subscription

logger = logging.getLogger(__name__)

PROFILE_FIELDS = (
    "name",
    "photo_url",
    "title",
    "company",
    "location",
    "about",
    "skills",
    "onboarding_completed",
)


def normalize_email(email: str) -> str:
    return email.strip().lower()


def get_user_by_email(db: Session, email: str) -> Optional[User]:
    return db.query(User).filter(User.email == normalize_email(email)).first()


def get_user(db: Session, user_id: str) -> Optional[User]:
    return db.query(User).filter(User.id == user_id).first()


def _new_user(email: str, name: str, password_hash: Optional[str], provider: str, photo_url: Optional[str] = None) -> User:
    """Build a user with the defaults every new account gets: trial, no connections."""
    user = User(
        email=normalize_email(email),
        name=name or "",
        password_hash=password_hash,
        auth_provider=provider,
        role="user",
        photo_url=photo_url,
        skills=[],
        connections=[],
        onboarding_completed=False,
    )
    user.subscription = Subscription(
        status="trial",
        plan=None,
        trial_ends_at=utcnow() + timedelta(days=TRIAL_DAYS),
        events_quota=DEFAULT_EVENTS_QUOTA,
        events_used=0,
    )
    return user


def signup(db: Session, email: str, password: str, name: str) -> User:
    """
    Register a password account.
    
    Raises:
        ConflictError: If the email is already registered
    """
    if get_user_by_email(db, email):
        raise ConflictError("Email already registered")

    user = _new_user(email, name, hash_password(password), "password")
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"User signed up: user_id={user.id}")
    return user


def authenticate(db: Session, email: str, password: str) -> Optional[User]:
    """Return the user when the credentials match, else None."""
    user = get_user_by_email(db, email)
    if not user or not verify_password(password, user.password_hash):
        logger.info("Login failed: invalid credentials")
        return None
    return user


def sync_oauth_user(
    db: Session,
    email: str,
    name: Optional[str] = None,
    photo_url: Optional[str] = None,
    provider: str = "google"
) -> User:
    """
    Mirror an OAuth identity into the users table.
    
    Existing profiles only have empty name/photo filled in; edits the user
    made locally win over provider data.
    """
    user = get_user_by_email(db, email)
    if user:
        changed = False
        if name and not user.name:
            user.name = name
            changed = True
        if photo_url and not user.photo_url:
            user.photo_url = photo_url
            changed = True
        if user.subscription is None:
            user.subscription = _new_user(email, name, None, provider).subscription
            changed = True
        if changed:
            db.commit()
            db.refresh(user)
        logger.info(f"OAuth login synced: user_id={user.id}, provider={provider}")
        return user

    user = _new_user(email, name or "", None, provider, photo_url=photo_url)
    db.add(user)
    db.commit()
    db.refresh(user)

    logger.info(f"OAuth account created: user_id={user.id}, provider={provider}")
    return user


def update_profile(db: Session, user: User, updates: dict) -> User:
    """Apply a partial profile update. Unknown keys are ignored."""
    for field in PROFILE_FIELDS:
        if field in updates and updates[field] is not None:
            value = updates[field]
            if field == "skills":
                value = list(dict.fromkeys(skill.strip() for skill in value if skill.strip()))
            setattr(user, field, value)

    user.updated_at = utcnow()
    db.commit()
    db.refresh(user)

    logger.info(f"Profile updated: user_id={user.id}, fields={sorted(updates)}")
    return user


def post_login_redirect(user: User) -> str:
    """Where the client should land after login."""
    if user.role == "admin":
        return "/admin"
    if not user.onboarding_completed:
        return "/onboarding"
    return "/events"


def list_users(db: Session, role: Optional[str] = None, limit: int = 100, offset: int = 0) -> List[User]:
    query = db.query(User)
    if role:
        query = query.filter(User.role == role)
    return query.order_by(User.created_at.desc()).offset(offset).limit(limit).all()


def set_role(db: Session, user_id: str, role: str) -> User:
    user = get_user(db, user_id)
    if not user:
        raise NotFoundError("User not found")
    user.role = role
    db.commit()
    db.refresh(user)
    logger.info(f"Role changed: user_id={user.id}, role={role}")
    return user
