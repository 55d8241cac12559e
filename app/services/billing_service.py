"""
Billing service for Stripe integration.

Handles payment intents, checkout sessions, the customer portal and webhook
event processing. Subscription state lives on the `subscriptions` table.
"""
import logging
from datetime import datetime, timezone
from typing import Optional, Dict

import stripe
from sqlalchemy.orm import Session

from app.core import config
from app.core.exceptions import ExternalServiceError, NotFoundError
from app.core.plan_limits import get_events_quota_for_price, get_plan_from_price_id
from app.db.models.user import User
from app.db.models.subscription import Subscription
from app.services.quota_service import get_subscription_for_user

logger = logging.getLogger(__name__)

# Initialize Stripe
if config.STRIPE_SECRET_KEY:
    stripe.api_key = config.STRIPE_SECRET_KEY
else:
    logger.warning("STRIPE_SECRET_KEY not configured - Stripe features disabled")


def _require_stripe():
    if not stripe.api_key:
        raise ExternalServiceError("Stripe not configured - STRIPE_SECRET_KEY required")


def to_minor_units(amount: float) -> int:
    """49.99 -> 4999"""
    return int(round(amount * 100))


def create_payment_intent(
    customer_id: Optional[str],
    amount: Optional[float],
    currency: str = "usd",
    description: Optional[str] = None,
    metadata: Optional[Dict[str, str]] = None
) -> str:
    """
    Create a Stripe PaymentIntent for a one-off charge.
    
    Args:
        customer_id: Stripe customer ID
        amount: Amount in major units (dollars)
        
    Returns:
        The PaymentIntent client secret for the browser
        
    Raises:
        ValueError: Missing customer or amount
        ExternalServiceError: Stripe call failed
    """
    if not customer_id or not amount:
        raise ValueError("Customer ID and amount are required")

    _require_stripe()
    try:
        intent = stripe.PaymentIntent.create(
            amount=to_minor_units(amount),
            currency=currency.lower(),
            customer=customer_id,
            description=description,
            metadata=metadata or {},
            automatic_payment_methods={"enabled": True},
        )
    except stripe.error.StripeError as e:
        logger.error(f"Stripe error creating payment intent: {e}")
        raise ExternalServiceError(f"Failed to create payment intent: {e}") from e

    logger.info(f"Payment intent created: id={intent.id}, customer={customer_id}")
    return intent.client_secret


def get_or_create_customer(db: Session, user: User) -> str:
    """Stripe customer id for the user, created on first use."""
    subscription = get_subscription_for_user(db, user.id)
    if subscription.stripe_customer_id:
        return subscription.stripe_customer_id

    _require_stripe()
    try:
        customer = stripe.Customer.create(
            email=user.email,
            name=user.name,
            metadata={"user_id": str(user.id)},
        )
    except stripe.error.StripeError as e:
        logger.error(f"Stripe error creating customer: {e}")
        raise ExternalServiceError(f"Failed to create customer: {e}") from e

    subscription.stripe_customer_id = customer.id
    db.commit()
    logger.info(f"Stripe customer created: user_id={user.id}, customer_id={customer.id}")
    return customer.id


def create_checkout_session(
    db: Session,
    user: User,
    price_id: str,
    success_url: Optional[str] = None,
    cancel_url: Optional[str] = None
) -> Dict[str, str]:
    """
    Create a subscription checkout session.
    
    Returns:
        Dictionary with 'checkout_url' and 'session_id'
    """
    if get_plan_from_price_id(price_id) is None:
        raise ValueError(f"Unknown plan price: {price_id}")

    customer_id = get_or_create_customer(db, user)
    try:
        session = stripe.checkout.Session.create(
            customer=customer_id,
            payment_method_types=["card"],
            mode="subscription",
            line_items=[{"price": price_id, "quantity": 1}],
            success_url=success_url or f"{config.FRONTEND_URL}/billing?success=true",
            cancel_url=cancel_url or f"{config.FRONTEND_URL}/billing?canceled=true",
            metadata={"user_id": str(user.id)},
            subscription_data={"metadata": {"user_id": str(user.id)}},
            allow_promotion_codes=True,
        )
    except stripe.error.StripeError as e:
        logger.error(f"Stripe error creating checkout session: {e}")
        raise ExternalServiceError(f"Failed to create checkout session: {e}") from e

    logger.info(f"Checkout session created: user_id={user.id}, session_id={session.id}")
    return {"checkout_url": session.url, "session_id": session.id}


def create_portal_session(db: Session, user: User, return_url: Optional[str] = None) -> str:
    subscription = get_subscription_for_user(db, user.id)
    if not subscription.stripe_customer_id:
        raise NotFoundError("No billing account for this user")

    _require_stripe()
    try:
        session = stripe.billing_portal.Session.create(
            customer=subscription.stripe_customer_id,
            return_url=return_url or f"{config.FRONTEND_URL}/billing",
        )
    except stripe.error.StripeError as e:
        logger.error(f"Stripe error creating portal session: {e}")
        raise ExternalServiceError(f"Failed to create portal session: {e}") from e
    return session.url


def verify_webhook(request_body: bytes, signature: Optional[str]) -> dict:
    """
    Verify and parse a Stripe webhook event.
    
    Raises:
        ValueError: Missing secret/signature or verification failed
    """
    if not config.STRIPE_WEBHOOK_SECRET:
        raise ValueError("STRIPE_WEBHOOK_SECRET not configured")
    if not signature:
        raise ValueError("Stripe signature missing")

    try:
        event = stripe.Webhook.construct_event(request_body, signature, config.STRIPE_WEBHOOK_SECRET)
    except stripe.error.SignatureVerificationError as e:
        logger.error(f"Webhook signature verification failed: {e}")
        raise ValueError(f"Webhook signature verification failed: {e}") from e

    logger.info(f"Verified webhook event: {event['type']}, id={event['id']}")
    return event


def _timestamp(value) -> Optional[datetime]:
    """Stripe epoch seconds to naive UTC."""
    if not value:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc).replace(tzinfo=None)


def _first_price_id(stripe_subscription) -> Optional[str]:
    items = stripe_subscription["items"]["data"]
    if not items:
        return None
    return items[0]["price"]["id"]


def _apply_paid_subscription(subscription: Subscription, stripe_subscription, reset_usage: bool = True) -> None:
    """Copy plan, quota and period from a Stripe subscription object."""
    price_id = _first_price_id(stripe_subscription)
    subscription.status = "active"
    subscription.plan = get_plan_from_price_id(price_id)
    subscription.stripe_subscription_id = stripe_subscription["id"]
    subscription.stripe_price_id = price_id
    subscription.events_quota = get_events_quota_for_price(price_id)
    if reset_usage:
        subscription.events_used = 0
    subscription.current_period_start = _timestamp(stripe_subscription.get("current_period_start"))
    subscription.current_period_end = _timestamp(stripe_subscription.get("current_period_end"))


def _find_by_customer(db: Session, customer_id: Optional[str]) -> Optional[Subscription]:
    if not customer_id:
        return None
    return db.query(Subscription).filter(Subscription.stripe_customer_id == customer_id).first()


def handle_checkout_completed(db: Session, session: dict) -> None:
    user_id = (session.get("metadata") or {}).get("user_id")
    if not user_id:
        logger.error("No user_id found in checkout session metadata")
        return

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        logger.error(f"Checkout completed for unknown user_id={user_id}")
        return

    subscription = get_subscription_for_user(db, user.id)
    if session.get("customer"):
        subscription.stripe_customer_id = session["customer"]

    if session.get("subscription"):
        stripe_subscription = stripe.Subscription.retrieve(session["subscription"])
        _apply_paid_subscription(subscription, stripe_subscription)

    db.commit()
    logger.info(f"Subscription activated: user_id={user.id}, plan={subscription.plan}, quota={subscription.events_quota}")


def handle_invoice_paid(db: Session, invoice: dict) -> None:
    """Renewal: refresh the period and reset events used."""
    subscription_id = invoice.get("subscription")
    if not subscription_id:
        return

    subscription = _find_by_customer(db, invoice.get("customer"))
    if not subscription:
        logger.error(f"Invoice paid for unknown customer={invoice.get('customer')}")
        return

    stripe_subscription = stripe.Subscription.retrieve(subscription_id)
    _apply_paid_subscription(subscription, stripe_subscription)
    db.commit()
    logger.info(f"Subscription renewed: user_id={subscription.user_id}, quota={subscription.events_quota}")


def handle_subscription_updated(db: Session, stripe_subscription: dict) -> None:
    subscription = _find_by_customer(db, stripe_subscription.get("customer"))
    if not subscription:
        logger.error(f"Subscription update for unknown customer={stripe_subscription.get('customer')}")
        return

    stripe_status = stripe_subscription.get("status")
    if stripe_status == "active":
        _apply_paid_subscription(subscription, stripe_subscription, reset_usage=False)
    elif stripe_status == "trialing":
        subscription.status = "trial"
    else:
        subscription.status = "inactive"
    subscription.current_period_end = _timestamp(stripe_subscription.get("current_period_end"))

    db.commit()
    logger.info(f"Subscription updated: user_id={subscription.user_id}, stripe_status={stripe_status}")


def handle_subscription_deleted(db: Session, stripe_subscription: dict) -> None:
    subscription = _find_by_customer(db, stripe_subscription.get("customer"))
    if not subscription:
        return
    subscription.status = "inactive"
    subscription.stripe_subscription_id = None
    db.commit()
    logger.info(f"Subscription cancelled: user_id={subscription.user_id}")


WEBHOOK_HANDLERS = {
    "checkout.session.completed": handle_checkout_completed,
    "invoice.payment_succeeded": handle_invoice_paid,
    "customer.subscription.updated": handle_subscription_updated,
    "customer.subscription.deleted": handle_subscription_deleted,
}


def process_webhook_event(db: Session, event: dict) -> bool:
    """
    Dispatch a verified event.
    
    Returns:
        True if the event type was handled, False if it was ignored
    """
    handler = WEBHOOK_HANDLERS.get(event["type"])
    if handler is None:
        logger.debug(f"Ignoring webhook event type {event['type']}")
        return False
    handler(db, event["data"]["object"])
    return True
