"""
Network directory queries: who to show on the Network page, search and
skill-based recommendations.
"""
import logging
from typing import List

from sqlalchemy.orm import Session

from app.db.models.user import User

logger = logging.getLogger(__name__)

NETWORK_PAGE_SIZE = 50
RECOMMENDATION_CANDIDATES = 20
RECOMMENDATION_LIMIT = 10


def get_network_users(db: Session, current_user_id: str) -> List[User]:
    """Members with the `user` role, excluding the caller."""
    return (
        db.query(User)
        .filter(User.role == "user", User.id != current_user_id)
        .order_by(User.created_at.desc())
        .limit(NETWORK_PAGE_SIZE)
        .all()
    )


def get_user_connections(db: Session, user_id: str) -> List[str]:
    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        return []
    return list(user.connections or [])


def get_connection_profiles(db: Session, user_id: str) -> List[User]:
    """Profiles behind the user's connection ids, in connection order."""
    connection_ids = get_user_connections(db, user_id)
    if not connection_ids:
        return []
    users = db.query(User).filter(User.id.in_(connection_ids)).all()
    by_id = {user.id: user for user in users}
    return [by_id[cid] for cid in connection_ids if cid in by_id]


def _matches(user: User, term: str) -> bool:
    fields = [user.name, user.company, user.title]
    if any(value and term in value.lower() for value in fields):
        return True
    return any(term in skill.lower() for skill in (user.skills or []))


def search_users(db: Session, search_term: str, current_user_id: str) -> List[User]:
    """
    Case-insensitive substring search on name, company, title and skills.
    
    Matching runs in Python over the first page of members because skills
    live in a JSON column.
    """
    term = (search_term or "").strip().lower()
    candidates = get_network_users(db, current_user_id)
    if not term:
        return candidates
    results = [user for user in candidates if _matches(user, term)]
    logger.debug(f"User search: term={term!r}, results={len(results)}")
    return results


def get_connection_recommendations(db: Session, user_id: str, user_skills: List[str]) -> List[User]:
    """
    Suggest people to connect with.
    
    Members sharing at least one skill come first; when there are fewer than
    ten, other members fill the list. Existing connections are never
    suggested.
    """
    exclude = set(get_user_connections(db, user_id))
    exclude.add(user_id)
    wanted = {skill.strip().lower() for skill in (user_skills or []) if skill.strip()}

    members = (
        db.query(User)
        .filter(User.role == "user")
        .order_by(User.created_at.desc())
        .all()
    )
    candidates = [member for member in members if member.id not in exclude]

    recommendations: List[User] = []
    if wanted:
        for member in candidates:
            skills = {skill.lower() for skill in (member.skills or [])}
            if skills & wanted:
                recommendations.append(member)
            if len(recommendations) >= RECOMMENDATION_CANDIDATES:
                break

    if len(recommendations) < RECOMMENDATION_LIMIT:
        seen = {member.id for member in recommendations}
        for member in candidates[:RECOMMENDATION_CANDIDATES]:
            if member.id not in seen:
                recommendations.append(member)

    return recommendations[:RECOMMENDATION_LIMIT]
