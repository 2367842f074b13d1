"""
Logs API endpoints - Daily check-ins.
"""

from fastapi import APIRouter, HTTPException, Depends, status
from typing import List

from ..config import settings
from ..core import NoUserFoundError, WellnessSession
from ..core.gamification import submit_log
from ..models import Log, LogEntry, LogSubmission
from .deps import get_session

router = APIRouter(prefix="/logs", tags=["logs"])


@router.post("", response_model=LogSubmission, status_code=status.HTTP_201_CREATED)
async def create_log(
    entry: LogEntry,
    session: WellnessSession = Depends(get_session)
):
    """
    Submit a daily log and collect XP and streak rewards.

    Args:
        entry: Category values; at least one must be set
        session: Wellness session

    Returns:
        LogSubmission: Stored log, rewards and refreshed dashboard state
    """
    if entry.filled_categories() == 0:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail="Please fill at least one category"
        )

    try:
        return await submit_log(session, entry, scale_mode=settings.avatar_scale_mode)
    except NoUserFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))


@router.get("", response_model=List[Log])
async def list_logs(session: WellnessSession = Depends(get_session)):
    """All logs, oldest first."""
    return await session.logs()
