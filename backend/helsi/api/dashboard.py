"""
Dashboard API endpoints - Avatar, insight, confidence and leaderboard.
"""

from fastapi import APIRouter, HTTPException, Depends, status
from typing import List

from ..config import settings
from ..core import NoUserFoundError, WellnessSession
from ..core import gamification
from ..models import DashboardSummary, LeaderboardEntry
from .deps import get_session

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("", response_model=DashboardSummary)
async def get_dashboard(session: WellnessSession = Depends(get_session)):
    """Everything the home screen shows for the current user."""
    try:
        user = await session.require_user()
    except NoUserFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    return DashboardSummary(
        user=user,
        avatar=await gamification.get_avatar_state(session, scale_mode=settings.avatar_scale_mode),
        insight=await gamification.generate_insight(session),
        confidence=await gamification.get_confidence_level(session),
    )


@router.get("/leaderboard", response_model=List[LeaderboardEntry])
async def get_leaderboard(session: WellnessSession = Depends(get_session)):
    """User and peers by consistency, highest first. Empty without a user."""
    return await gamification.get_leaderboard(session)
