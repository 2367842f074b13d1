"""
Insights API endpoints - Recovery, strain and sleep over the last week.
"""

from fastapi import APIRouter, Depends

from ..config import settings
from ..core import WellnessSession, compute_insights
from ..core.gamification import confidence_for
from .deps import get_session

router = APIRouter(prefix="/insights", tags=["insights"])


@router.get("")
async def get_insights(session: WellnessSession = Depends(get_session)):
    """
    Aggregated metrics with the confidence level for the amount of data.

    Returns:
        dict: {"report": InsightsReport, "confidence": ConfidenceLevel}
    """
    logs = await session.logs()
    report = compute_insights(logs, strain_formula=settings.strain_formula)
    return {
        "report": report.to_storage(),
        "confidence": confidence_for(len(logs)).to_storage(),
    }
