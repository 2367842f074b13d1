"""
User Model - The single local user created by the onboarding survey.
"""

from datetime import datetime
from typing import Literal, Optional
from pydantic import Field

from .base import CamelModel

AvatarType = Literal["Explorer", "Calm", "Charger"]


class SurveyAnswers(CamelModel):
    """Onboarding survey answers. Values are free-form option labels."""
    sleep_quality: str = ""
    fatigue_frequency: str = ""
    tracks_health: str = ""
    main_goal: str = ""


class User(CamelModel):
    """User model with gamification state."""
    id: str
    name: str = "You"
    avatar_type: AvatarType
    survey_answers: SurveyAnswers = Field(default_factory=SurveyAnswers)
    xp: int = Field(default=0, ge=0)
    streak: int = Field(default=0, ge=0)
    last_log_date: Optional[datetime] = None
    created_at: datetime


class SurveyCompletion(CamelModel):
    """Request body for completing the onboarding survey."""
    answers: SurveyAnswers
    avatar_type: AvatarType = "Explorer"


class UserUpdate(CamelModel):
    """Profile edit - only the display name can change."""
    name: str = Field(..., max_length=50)
