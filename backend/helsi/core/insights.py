"""
Insights Aggregator - Recovery, strain and sleep scores over the last week of logs.
"""

import math
from typing import List, Sequence

from ..models import InsightsReport, Log, Recommendation, Trend

INSIGHTS_WINDOW = 7
MIN_LOGS_FOR_INSIGHTS = 2
MAX_STRAIN = 21

STRAIN_FORMULAS = ("weighted", "simple")


def _round(value: float) -> int:
    """Round half up, matching how the scores were always displayed."""
    return int(math.floor(value + 0.5))


def recovery_label(recovery: int) -> str:
    if recovery >= 70:
        return "Excellent"
    if recovery >= 40:
        return "Moderate"
    return "Low"


def strain_score(high_stress: int, poor_sleep: int, window_size: int, formula: str = "weighted") -> int:
    """
    Strain on a 0-21 scale.

    "weighted" counts high-stress days double and poor nights one and a half;
    "simple" scales the share of high-stress days to 21.
    """
    if formula == "weighted":
        raw = (high_stress * 2 + poor_sleep * 1.5) * 1.5
    elif formula == "simple":
        raw = high_stress / window_size * MAX_STRAIN
    else:
        raise ValueError(f"Unknown strain formula: {formula}")
    return min(MAX_STRAIN, _round(raw))


def _trends(good_sleep: int, poor_sleep: int, low_stress: int, happy_mood: int) -> List[Trend]:
    trends: List[Trend] = []

    if good_sleep >= 5:
        trends.append(Trend(title="Strong Sleep Pattern", category="sleep",
                            value=f"{good_sleep}/7 days", trend="up"))
    elif poor_sleep >= 3:
        trends.append(Trend(title="Sleep Needs Attention", category="sleep",
                            value=f"{poor_sleep} poor nights", trend="down"))

    if low_stress >= 5:
        trends.append(Trend(title="Stress Under Control", category="stress",
                            value=f"{low_stress}/7 days", trend="up"))

    if happy_mood >= 5:
        trends.append(Trend(title="Positive Mood Streak", category="mood",
                            value=f"{happy_mood}/7 days", trend="up"))

    return trends


def _recommendations(sleep_score: int, high_stress: int, recovery: int) -> List[Recommendation]:
    recommendations: List[Recommendation] = []

    if sleep_score < 60:
        recommendations.append(Recommendation(
            title="Prioritize Sleep",
            description="Your sleep quality is impacting recovery. Try going to bed 30min earlier.",
            priority="high",
        ))

    if high_stress >= 3:
        recommendations.append(Recommendation(
            title="Reduce Strain",
            description="High stress detected multiple times. Consider meditation or light activity.",
            priority="medium",
        ))

    if recovery > 80:
        recommendations.append(Recommendation(
            title="Optimal Recovery",
            description="You're recovered! This is a great day for challenging activities.",
            priority="low",
        ))

    return recommendations


def compute_insights(logs: Sequence[Log], strain_formula: str = "weighted") -> InsightsReport:
    """
    Build the dashboard metrics from the trailing window of logs.

    Args:
        logs: All logs in chronological order
        strain_formula: "weighted" or "simple"

    Returns:
        InsightsReport; all zeros and empty lists with fewer than two logs
    """
    if strain_formula not in STRAIN_FORMULAS:
        raise ValueError(f"Unknown strain formula: {strain_formula}")

    if len(logs) < MIN_LOGS_FOR_INSIGHTS:
        return InsightsReport(data_points=len(logs))

    window = list(logs[-INSIGHTS_WINDOW:])
    size = len(window)

    good_sleep = sum(1 for log in window if log.sleep == "Good")
    poor_sleep = sum(1 for log in window if log.sleep == "Poor")
    low_stress = sum(1 for log in window if log.stress == "Low")
    high_stress = sum(1 for log in window if log.stress == "High")
    happy_mood = sum(1 for log in window if log.mood == "Happy")

    recovery = _round((good_sleep + low_stress + happy_mood) / (size * 3) * 100)
    sleep_score = _round(good_sleep / size * 100)

    return InsightsReport(
        recovery=recovery,
        strain=strain_score(high_stress, poor_sleep, size, strain_formula),
        sleep_score=sleep_score,
        trends=_trends(good_sleep, poor_sleep, low_stress, happy_mood),
        recommendations=_recommendations(sleep_score, high_stress, recovery),
        data_points=len(logs),
        recovery_label=recovery_label(recovery),
    )
