"""
Pydantic schemas for billing endpoints.
"""
from typing import Optional, Dict
from pydantic import BaseModel, Field


class PaymentIntentRequest(BaseModel):
    """Request schema for a one-off payment (amount in major currency units)."""
    customer_id: Optional[str] = Field(None, description="Stripe customer ID")
    amount: Optional[float] = Field(None, gt=0, description="Amount, e.g. 49.99")
    currency: str = Field("usd", min_length=3, max_length=3)
    description: Optional[str] = None
    metadata: Dict[str, str] = {}
    
    class Config:
        json_schema_extra = {
            "example": {
                "customer_id": "cus_123",
                "amount": 49.0,
                "currency": "usd",
                "description": "Featured demo placement"
            }
        }


class PaymentIntentResponse(BaseModel):
    client_secret: str


class CreateCheckoutSessionRequest(BaseModel):
    """Request schema for creating checkout session."""
    price_id: str = Field(..., description="Stripe price ID of the plan")
    success_url: Optional[str] = Field(None, description="URL to redirect after successful payment")
    cancel_url: Optional[str] = Field(None, description="URL to redirect if payment is canceled")


class CreateCheckoutSessionResponse(BaseModel):
    """Response schema for checkout session creation."""
    checkout_url: str = Field(..., description="Stripe checkout session URL")
    session_id: str = Field(..., description="Stripe checkout session ID")


class CreatePortalSessionRequest(BaseModel):
    """Request schema for creating portal session."""
    return_url: Optional[str] = Field(None, description="URL to return to after portal session")


class CreatePortalSessionResponse(BaseModel):
    """Response schema for portal session creation."""
    url: str = Field(..., description="Stripe customer portal URL")
