"""
Billing endpoints: one-off payments, plan checkout, customer portal and the
Stripe webhook.
"""
import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from sqlalchemy.orm import Session

from app.core.auth_dependency import get_db, get_current_user
from app.core.exceptions import raise_http_error
from app.db.models.user import User
from app.schemas.billing import (
    PaymentIntentRequest,
    PaymentIntentResponse,
    CreateCheckoutSessionRequest,
    CreateCheckoutSessionResponse,
    CreatePortalSessionRequest,
    CreatePortalSessionResponse,
)
from app.services import billing_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["Billing"])


@router.post("/payment-intent", response_model=PaymentIntentResponse)
def create_payment_intent(payload: PaymentIntentRequest, user: User = Depends(get_current_user)):
    try:
        client_secret = billing_service.create_payment_intent(
            customer_id=payload.customer_id,
            amount=payload.amount,
            currency=payload.currency,
            description=payload.description,
            metadata={**payload.metadata, "user_id": str(user.id)},
        )
    except ValueError as e:
        raise_http_error(e)
    return PaymentIntentResponse(client_secret=client_secret)


@router.post("/checkout-session", response_model=CreateCheckoutSessionResponse)
def create_checkout_session(
    payload: CreateCheckoutSessionRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        session = billing_service.create_checkout_session(
            db, user, payload.price_id, payload.success_url, payload.cancel_url
        )
    except ValueError as e:
        raise_http_error(e)
    return CreateCheckoutSessionResponse(**session)


@router.post("/portal-session", response_model=CreatePortalSessionResponse)
def create_portal_session(
    payload: CreatePortalSessionRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    try:
        url = billing_service.create_portal_session(db, user, payload.return_url)
    except ValueError as e:
        raise_http_error(e)
    return CreatePortalSessionResponse(url=url)


# ✅ STRIPE WEBHOOK
@router.post("/webhook")
async def stripe_webhook(
    request: Request,
    stripe_signature: Optional[str] = Header(None),
    db: Session = Depends(get_db)
):
    payload = await request.body()

    try:
        event = billing_service.verify_webhook(payload, stripe_signature)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    try:
        handled = billing_service.process_webhook_event(db, event)
    except Exception as e:
        db.rollback()
        logger.error(f"Webhook processing failed for {event['type']}: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Webhook processing failed")

    return {"received": True, "handled": handled}
