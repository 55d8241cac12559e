"""
Pydantic schemas for user profiles.
"""
from typing import Optional, List
from datetime import datetime
from pydantic import BaseModel, Field


class SubscriptionResponse(BaseModel):
    status: str
    plan: Optional[str] = None
    trial_ends_at: Optional[datetime] = None
    events_quota: int
    events_used: int
    events_remaining: int
    current_period_end: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserResponse(BaseModel):
    """Full profile of the authenticated user."""
    id: str
    email: str
    name: str
    role: str
    photo_url: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    about: Optional[str] = None
    skills: List[str] = []
    onboarding_completed: bool = False
    experience_level: Optional[str] = None
    industry: Optional[str] = None
    primary_goal: Optional[str] = None
    interests: Optional[List[str]] = None
    assigned_role: Optional[str] = None
    onboarding_completed_at: Optional[datetime] = None
    connections: List[str] = []
    subscription: Optional[SubscriptionResponse] = None
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class NetworkProfileResponse(BaseModel):
    """Public view of another member, as listed on the Network page."""
    id: str
    name: str
    email: str
    role: str
    photo_url: Optional[str] = None
    title: Optional[str] = None
    company: Optional[str] = None
    location: Optional[str] = None
    about: Optional[str] = None
    skills: List[str] = []
    connections: List[str] = []

    class Config:
        from_attributes = True


class ProfileUpdate(BaseModel):
    """Partial profile update; omitted fields are left untouched."""
    name: Optional[str] = Field(None, min_length=1, max_length=200)
    photo_url: Optional[str] = None
    title: Optional[str] = Field(None, max_length=200)
    company: Optional[str] = Field(None, max_length=200)
    location: Optional[str] = Field(None, max_length=200)
    about: Optional[str] = Field(None, max_length=5000)
    skills: Optional[List[str]] = None
    onboarding_completed: Optional[bool] = None


class RoleUpdate(BaseModel):
    role: str = Field(..., pattern="^(user|admin)$")


ROLE_ID_PATTERN = "^(enterprise_closer|startup_hustler|saas_specialist|relationship_builder|sales_leader|technical_seller)$"


class OnboardingRequest(BaseModel):
    """Answers from the onboarding questionnaire; every question is optional."""
    years_experience: Optional[int] = Field(None, ge=0, le=70)
    experience_level: Optional[str] = Field(None, pattern="^(entry|mid|senior|executive)$")
    industry: Optional[str] = Field(None, max_length=200)
    company_size: Optional[str] = Field(None, pattern="^(startup|small|medium|large|enterprise)$")
    specializations: Optional[List[str]] = None
    primary_goal: Optional[str] = Field(
        None, pattern="^(networking|learning|career_growth|business_development|mentoring)$"
    )
    networking_style: Optional[str] = Field(None, pattern="^(introvert|extrovert|ambivert)$")
    communication_preference: Optional[str] = Field(None, pattern="^(direct|collaborative|analytical|creative)$")
    interests: Optional[List[str]] = None
    event_preferences: Optional[List[str]] = None
    availability: Optional[str] = Field(None, pattern="^(very_active|moderately_active|occasional)$")
    time_zone: Optional[str] = Field(None, max_length=64)
    preferred_meeting_times: Optional[List[str]] = None
    assigned_role: Optional[str] = Field(None, pattern=ROLE_ID_PATTERN, description="Skip scoring and keep this role")
    completed_at: Optional[datetime] = None

    class Config:
        json_schema_extra = {
            "example": {
                "experience_level": "senior",
                "industry": "Software & Technology",
                "primary_goal": "networking",
                "specializations": ["Enterprise Sales"],
                "communication_preference": "collaborative",
                "networking_style": "ambivert",
                "interests": ["AI", "Cloud"],
                "time_zone": "America/New_York"
            }
        }


class OnboardingRecommendations(BaseModel):
    events: List[str] = []
    connections: List[str] = []


class OnboardingResponse(BaseModel):
    user: UserResponse
    assigned_role: str
    recommendations: OnboardingRecommendations


class AssignedRoleUpdate(BaseModel):
    assigned_role: str = Field(..., pattern=ROLE_ID_PATTERN)
