"""
Pydantic schemas for authentication endpoints.
"""
from typing import Optional
from pydantic import BaseModel, EmailStr, Field, field_validator

from app.schemas.user import UserResponse


class SignupRequest(BaseModel):
    """Request schema for user signup."""
    name: str = Field(..., min_length=1, max_length=200, description="User's full name")
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., description="User's password (8-72 bytes)")
    
    @field_validator("password")
    @classmethod
    def validate_password_length(cls, v: str) -> str:
        """Validate password length in bytes (bcrypt limit is 72 bytes)."""
        password_bytes = v.encode("utf-8")
        if len(password_bytes) > 72:
            raise ValueError("Password too long (bcrypt limit 72 bytes)")
        if len(password_bytes) < 8:
            raise ValueError("Password must be at least 8 characters")
        return v
    
    class Config:
        json_schema_extra = {
            "example": {
                "name": "Ada Founder",
                "email": "ada@example.com",
                "password": "SecurePass123"
            }
        }


class LoginRequest(BaseModel):
    """Request schema for JSON login."""
    email: EmailStr = Field(..., description="User's email address")
    password: str = Field(..., description="User's password")


class OAuthSyncRequest(BaseModel):
    """Profile data handed over by an OAuth provider callback."""
    email: EmailStr
    name: Optional[str] = Field(None, max_length=200)
    photo_url: Optional[str] = None
    provider: str = Field("google", pattern="^(google|linkedin)$")


class TokenResponse(BaseModel):
    """Bearer token plus where the client should send the user next."""
    access_token: str
    token_type: str = "bearer"
    redirect_to: str = Field(..., description="/admin, /onboarding or /events")
    user: UserResponse
