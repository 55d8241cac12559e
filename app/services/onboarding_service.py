"""
Onboarding service.

Stores the onboarding questionnaire on the user's profile and picks the
networking role the member is matched to. The role drives the event and
connection suggestions shown right after onboarding.
"""
import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError
from app.db.base import to_utc_naive, utcnow
from app.db.models.user import User

logger = logging.getLogger(__name__)

# Order matters: on a tied score the role listed last wins
ROLE_IDS = (
    "enterprise_closer",
    "startup_hustler",
    "saas_specialist",
    "relationship_builder",
    "sales_leader",
    "technical_seller",
)

QUESTIONNAIRE_FIELDS = (
    "years_experience",
    "experience_level",
    "industry",
    "company_size",
    "specializations",
    "primary_goal",
    "networking_style",
    "communication_preference",
    "interests",
    "event_preferences",
    "availability",
    "time_zone",
    "preferred_meeting_times",
)
LIST_FIELDS = ("specializations", "interests", "event_preferences", "preferred_meeting_times")

# answer -> {role: points}
EXPERIENCE_POINTS = {
    "executive": {"sales_leader": 4, "enterprise_closer": 3},
    "senior": {"sales_leader": 2, "enterprise_closer": 2, "relationship_builder": 2},
    "mid": {"saas_specialist": 2, "startup_hustler": 2},
    "entry": {"startup_hustler": 3, "saas_specialist": 1},
}
GOAL_POINTS = {
    "networking": {"relationship_builder": 4},
    "business_development": {"enterprise_closer": 3, "startup_hustler": 2},
    "career_growth": {"sales_leader": 3},
    "mentoring": {"sales_leader": 4},
    "learning": {"saas_specialist": 2, "technical_seller": 2},
}
COMMUNICATION_POINTS = {
    "analytical": {"technical_seller": 3, "enterprise_closer": 2},
    "collaborative": {"relationship_builder": 3, "sales_leader": 2},
    "direct": {"startup_hustler": 3, "enterprise_closer": 1},
    "creative": {"startup_hustler": 2, "saas_specialist": 2},
}
NETWORKING_STYLE_POINTS = {
    "extrovert": {"startup_hustler": 2, "sales_leader": 2},
    "introvert": {"technical_seller": 2, "saas_specialist": 1},
    "ambivert": {"relationship_builder": 2, "enterprise_closer": 1},
}

# (substrings, {role: points}); a rule fires once when any substring appears
INDUSTRY_RULES = [
    (("Software", "Technology"), {"saas_specialist": 3, "technical_seller": 2}),
    (("Financial", "Healthcare"), {"enterprise_closer": 3}),
]
SPECIALIZATION_RULES = [
    (("Enterprise",), {"enterprise_closer": 2}),
    (("Technical", "Engineering"), {"technical_seller": 3}),
    (("Customer Success", "Account Management"), {"relationship_builder": 2}),
    (("Business Development",), {"startup_hustler": 2}),
    (("Sales Operations", "Revenue Operations"), {"sales_leader": 2}),
]

ROLE_EVENTS = {
    "enterprise_closer": [
        "Enterprise Sales Strategy Workshop",
        "C-Level Networking Mixer",
        "Account-Based Selling Masterclass",
        "Strategic Partnership Forum",
    ],
    "startup_hustler": [
        "Startup Founder Networking",
        "Growth Hacking Workshop",
        "Pitch Practice Session",
        "Early-Stage Sales Strategies",
    ],
    "saas_specialist": [
        "SaaS Metrics Deep Dive",
        "Product-Led Growth Workshop",
        "Subscription Model Optimization",
        "Customer Success Strategies",
    ],
    "relationship_builder": [
        "Relationship Building Workshop",
        "Client Success Stories",
        "Long-term Partnership Strategies",
        "Customer Retention Masterclass",
    ],
    "sales_leader": [
        "Sales Leadership Forum",
        "Team Management Workshop",
        "Sales Coaching Certification",
        "Revenue Strategy Planning",
    ],
    "technical_seller": [
        "Technical Demo Best Practices",
        "Solution Architecture Workshop",
        "Developer Relations Networking",
        "API Integration Strategies",
    ],
}
INTEREST_CONNECTIONS = [
    ("AI", "AI/ML Sales Professionals"),
    ("Cybersecurity", "Cybersecurity Sales Experts"),
    ("Cloud", "Cloud Solutions Specialists"),
]


def _add_points(scores: Dict[str, int], points: Dict[str, int]) -> None:
    for role_id, value in points.items():
        scores[role_id] += value


def score_roles(answers: dict) -> Dict[str, int]:
    """Points per role for a set of questionnaire answers."""
    scores = {role_id: 0 for role_id in ROLE_IDS}

    _add_points(scores, EXPERIENCE_POINTS.get(answers.get("experience_level"), {}))
    _add_points(scores, GOAL_POINTS.get(answers.get("primary_goal"), {}))

    industry = answers.get("industry") or ""
    for needles, points in INDUSTRY_RULES:
        if any(needle in industry for needle in needles):
            _add_points(scores, points)

    for specialization in answers.get("specializations") or []:
        for needles, points in SPECIALIZATION_RULES:
            if any(needle in specialization for needle in needles):
                _add_points(scores, points)

    _add_points(scores, COMMUNICATION_POINTS.get(answers.get("communication_preference"), {}))
    _add_points(scores, NETWORKING_STYLE_POINTS.get(answers.get("networking_style"), {}))
    return scores


def assign_role(answers: dict) -> str:
    """Highest scoring role; ties go to the role later in ROLE_IDS."""
    scores = score_roles(answers)
    best = ROLE_IDS[0]
    for role_id in ROLE_IDS[1:]:
        if scores[role_id] >= scores[best]:
            best = role_id
    return best


def generate_recommendations(answers: dict, role_id: str) -> Dict[str, List[str]]:
    """Event titles for the role plus connection groups matching the member's interests."""
    connections = []
    for interest in answers.get("interests") or []:
        for needle, group in INTEREST_CONNECTIONS:
            if needle in interest:
                connections.append(group)
    return {"events": list(ROLE_EVENTS.get(role_id, [])), "connections": connections}


def complete_onboarding(db: Session, user: User, answers: dict) -> User:
    """
    Save questionnaire answers and mark onboarding complete.

    Only answered questions overwrite the profile. The role is scored from
    the saved profile unless the member already picked one in `answers`.

    Returns:
        The updated user
    """
    for field in QUESTIONNAIRE_FIELDS:
        value = answers.get(field)
        if value is None:
            continue
        if field in LIST_FIELDS:
            value = [item.strip() for item in value if item and item.strip()]
        setattr(user, field, value)

    profile = {field: getattr(user, field) for field in QUESTIONNAIRE_FIELDS}
    user.assigned_role = answers.get("assigned_role") or assign_role(profile)
    user.onboarding_completed = True
    user.onboarding_completed_at = to_utc_naive(answers.get("completed_at")) or utcnow()
    user.updated_at = utcnow()
    db.commit()
    db.refresh(user)

    logger.info(f"Onboarding completed: user_id={user.id}, assigned_role={user.assigned_role}")
    return user


def update_assigned_role(db: Session, user_id: str, role_id: str) -> User:
    """
    Replace the member's assigned role.

    Raises:
        NotFoundError: Unknown user
        ValueError: Unknown role id
    """
    if role_id not in ROLE_IDS:
        raise ValueError(f"Unknown role: {role_id}")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFoundError("User not found")

    user.assigned_role = role_id
    user.updated_at = utcnow()
    db.commit()
    db.refresh(user)

    logger.info(f"Assigned role updated: user_id={user.id}, assigned_role={role_id}")
    return user
