"""
Profile API endpoints - Onboarding survey, name edits, reset and demo data.
"""

import logging
from fastapi import APIRouter, HTTPException, Depends, status

from ..core import NoUserFoundError, WellnessSession
from ..models import SurveyCompletion, User, UserUpdate
from .deps import get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/profile", tags=["profile"])


@router.post("/survey", response_model=User, status_code=status.HTTP_201_CREATED)
async def complete_survey(
    completion: SurveyCompletion,
    session: WellnessSession = Depends(get_session)
):
    """
    Create the user from the onboarding survey.

    Args:
        completion: Survey answers and the chosen avatar type
        session: Wellness session

    Returns:
        User: The new user with zero XP and no streak
    """
    return await session.complete_survey(completion.answers, completion.avatar_type)


@router.get("", response_model=User)
async def get_profile(session: WellnessSession = Depends(get_session)):
    """Current user."""
    try:
        return await session.require_user()
    except NoUserFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.patch("", response_model=User)
async def update_profile(
    update: UserUpdate,
    session: WellnessSession = Depends(get_session)
):
    """
    Change the display name.

    Raises:
        HTTPException: 400 for a blank name, 404 without a user
    """
    try:
        return await session.rename_user(update.name)
    except NoUserFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def reset_profile(session: WellnessSession = Depends(get_session)):
    """Remove the user together with all logs and medical documents."""
    await session.reset()
    logger.info("Profile reset requested")


@router.post("/demo", response_model=User)
async def load_demo_data(session: WellnessSession = Depends(get_session)):
    """Replace all data with the demo user and a week of logs."""
    return await session.seed_demo_data()
