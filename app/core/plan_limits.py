"""
Subscription plan configuration.

Single source of truth for how many Rooms each plan may register for per
billing period.
"""
from typing import Dict, Optional

# Events quota per plan (per billing period)
PLAN_EVENT_QUOTAS: Dict[str, int] = {
    "trial": 3,
    "starter": 3,
    "professional": 8,
    "team": 10,
    "enterprise": 15,
}

# Checked in order; Stripe price ids carry the plan name
PRICE_KEYWORDS = ["starter", "professional", "enterprise", "team"]

ACTIVE_STATUSES = ("trial", "active")


def get_plan_from_price_id(price_id: Optional[str]) -> Optional[str]:
    """Infer the plan name from a Stripe price id such as 'price_professional_monthly'."""
    if not price_id:
        return None
    price_id = price_id.lower()
    for keyword in PRICE_KEYWORDS:
        if keyword in price_id:
            return keyword
    return None


def get_events_quota_for_price(price_id: Optional[str]) -> int:
    """Events quota granted by a Stripe price; unknown prices grant 0."""
    plan = get_plan_from_price_id(price_id)
    if plan is None:
        return 0
    return PLAN_EVENT_QUOTAS[plan]
