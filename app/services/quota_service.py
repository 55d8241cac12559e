"""
Events quota for Room registration.

Each subscription carries `events_quota` registrations per billing period;
registering for a Room consumes one. Stripe renewals reset `events_used`
(see billing_service).
"""
import logging
from typing import Dict

from sqlalchemy.orm import Session

from app.core.config import DEFAULT_EVENTS_QUOTA
from app.core.exceptions import QuotaExceededError
from app.core.plan_limits import ACTIVE_STATUSES
from app.db.base import to_utc_naive, utcnow
from app.db.models.subscription import Subscription

logger = logging.getLogger(__name__)


def get_subscription_for_user(db: Session, user_id: str) -> Subscription:
    """
    Get the user's subscription, creating an inactive one with no quota if
    the account predates subscriptions.
    """
    subscription = db.query(Subscription).filter(Subscription.user_id == user_id).first()
    if subscription is None:
        subscription = Subscription(user_id=user_id, status="inactive", events_quota=0, events_used=0)
        db.add(subscription)
        db.flush()
        logger.warning(f"Created missing subscription row: user_id={user_id}")
    return subscription


def is_trial_expired(subscription: Subscription) -> bool:
    if subscription.status != "trial" or subscription.trial_ends_at is None:
        return False
    trial_ends_at = to_utc_naive(subscription.trial_ends_at)
    return trial_ends_at < utcnow()


def check_event_quota(subscription: Subscription, amount: int = 1) -> None:
    """
    Raise if the subscription cannot cover `amount` more registrations.
    
    Raises:
        QuotaExceededError: Inactive subscription, expired trial or no quota left
    """
    if subscription.status not in ACTIVE_STATUSES:
        raise QuotaExceededError("An active subscription is required to register for Rooms")

    if is_trial_expired(subscription):
        raise QuotaExceededError("Your free trial has ended. Choose a plan to keep joining Rooms")

    used = subscription.events_used or 0
    quota = subscription.events_quota or 0
    if used + amount > quota:
        logger.warning(
            f"Events quota exceeded: user_id={subscription.user_id}, "
            f"status={subscription.status}, quota={quota}, used={used}"
        )
        raise QuotaExceededError(f"Events quota reached ({used}/{quota}). Upgrade your plan to join more Rooms")


def consume_event(subscription: Subscription, amount: int = 1) -> int:
    """
    Check and record usage on the subscription. The caller commits.
    
    Returns:
        Remaining registrations after this one
    """
    check_event_quota(subscription, amount)
    subscription.events_used = (subscription.events_used or 0) + amount
    remaining = subscription.events_remaining
    logger.info(
        f"Event quota consumed: user_id={subscription.user_id}, "
        f"used={subscription.events_used}/{subscription.events_quota}, remaining={remaining}"
    )
    return remaining


def get_usage_for_response(db: Session, user_id: str) -> Dict:
    """Subscription summary for GET /me/subscription."""
    subscription = get_subscription_for_user(db, user_id)
    db.commit()
    return {
        "status": subscription.status,
        "plan": subscription.plan,
        "trial_ends_at": subscription.trial_ends_at,
        "trial_expired": is_trial_expired(subscription),
        "events_quota": subscription.events_quota if subscription.events_quota is not None else DEFAULT_EVENTS_QUOTA,
        "events_used": subscription.events_used or 0,
        "events_remaining": subscription.events_remaining,
        "current_period_end": subscription.current_period_end,
    }
