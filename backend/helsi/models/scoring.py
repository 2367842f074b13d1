"""
Scoring Models - Outputs of the gamification engine and the insights aggregator.
"""

from datetime import datetime
from typing import List, Literal, Optional

from .base import CamelModel
from .user import User
from .log import Log

AvatarMood = Literal["Happy", "Neutral", "Low", "Energized", "Tired"]


class XPGain(CamelModel):
    base: int
    bonus: int
    total: int
    reason: str


class StreakStatus(CamelModel):
    current: int
    broken: bool
    last_log_date: Optional[datetime] = None


class AvatarState(CamelModel):
    state: AvatarMood
    color: str
    scale: float


class ConfidenceLevel(CamelModel):
    level: Literal["Low", "Medium", "High"]
    message: str


class LeaderboardEntry(CamelModel):
    id: str
    name: str
    xp: int
    streak: int
    consistency_score: float
    avatar_type: str


class LogSubmission(CamelModel):
    """Everything the client needs to refresh after a daily log."""
    log: Log
    xp_gain: XPGain
    streak: StreakStatus
    user: User
    avatar: AvatarState
    insight: str
    message: str
    description: Optional[str] = None


class Trend(CamelModel):
    title: str
    category: Literal["sleep", "stress", "mood"]
    value: str
    trend: Literal["up", "down"]


class Recommendation(CamelModel):
    title: str
    description: str
    priority: Literal["high", "medium", "low"]


class InsightsReport(CamelModel):
    recovery: int = 0
    strain: int = 0
    sleep_score: int = 0
    trends: List[Trend] = []
    recommendations: List[Recommendation] = []
    data_points: int = 0
    recovery_label: str = "Low"


class DashboardSummary(CamelModel):
    user: User
    avatar: AvatarState
    insight: str
    confidence: ConfidenceLevel
