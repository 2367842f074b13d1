"""Models module."""

from .base import CamelModel
from .user import User, SurveyAnswers, SurveyCompletion, UserUpdate
from .log import Log, LogEntry, CATEGORIES
from .medical import (
    Biomarker, Medication, ExtractedMedicalData, MedicalDocument, DocumentUploadResult
)
from .scoring import (
    XPGain, StreakStatus, AvatarState, ConfidenceLevel, LeaderboardEntry,
    LogSubmission, Trend, Recommendation, InsightsReport, DashboardSummary
)

__all__ = [
    'CamelModel',
    'User', 'SurveyAnswers', 'SurveyCompletion', 'UserUpdate',
    'Log', 'LogEntry', 'CATEGORIES',
    'Biomarker', 'Medication', 'ExtractedMedicalData', 'MedicalDocument', 'DocumentUploadResult',
    'XPGain', 'StreakStatus', 'AvatarState', 'ConfidenceLevel', 'LeaderboardEntry',
    'LogSubmission', 'Trend', 'Recommendation', 'InsightsReport', 'DashboardSummary',
]
