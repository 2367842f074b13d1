"""
Gamification Engine - XP, streaks, the avatar mood and short insights.

The ``*_for`` helpers are pure functions over models; the async operations
read and write through a WellnessSession.
"""

import logging
from datetime import datetime
from typing import List, Optional, Sequence

from ..models import (
    AvatarState, ConfidenceLevel, LeaderboardEntry, Log, LogEntry,
    LogSubmission, StreakStatus, User, XPGain,
)
from .exceptions import NoUserFoundError
from .session import WellnessSession

logger = logging.getLogger(__name__)

BASE_XP = 10
COMPLETE_LOG_BONUS_XP = 20

# Avatar palette, one color per state
AVATAR_COLORS = {
    "Energized": "hsl(145, 55%, 55%)",  # vibrant green
    "Happy": "hsl(50, 88%, 60%)",       # sunny yellow
    "Tired": "hsl(215, 30%, 50%)",      # deeper blue
    "Low": "hsl(345, 60%, 62%)",        # muted pink-red
    "Neutral": "hsl(180, 25%, 65%)",    # soft aqua
}
BASE_AVATAR_SCALE = 1.0
STREAK_SCALE_STEP = 0.02
STREAK_SCALE_CAP = 10

INSIGHT_WINDOW = 3
ROTATING_INSIGHTS = (
    "Your health patterns are taking shape. Keep logging to see clearer insights!",
    "Every log helps build your personalized health profile.",
    "Consistency is key - you're building valuable health data.",
)
KEEP_LOGGING_INSIGHT = "Keep logging to unlock personalized insights about your health patterns!"

# Synthetic peers shown next to the user
LEADERBOARD_PEERS = (
    LeaderboardEntry(id="friend_1", name="Sarah", xp=180, streak=5,
                     consistency_score=7.5, avatar_type="Calm"),
    LeaderboardEntry(id="friend_2", name="Mike", xp=150, streak=6,
                     consistency_score=8, avatar_type="Charger"),
    LeaderboardEntry(id="friend_3", name="Emma", xp=220, streak=8,
                     consistency_score=10, avatar_type="Explorer"),
)


def calculate_xp_gain(entry: LogEntry) -> XPGain:
    """XP for one log: a flat base plus a bonus when all five categories are filled."""
    bonus = COMPLETE_LOG_BONUS_XP if entry.is_complete() else 0
    return XPGain(
        base=BASE_XP,
        bonus=bonus,
        total=BASE_XP + bonus,
        reason="All categories filled!" if bonus > 0 else "Log submitted",
    )


def avatar_state_for(log: Optional[Log], streak: int = 0, scale_mode: str = "fixed") -> AvatarState:
    """
    Map the most recent log to an avatar mood. Earlier rules win.

    Args:
        log: Most recent log, or None when there are none
        streak: Current streak, only used when scale_mode is "streak"
        scale_mode: "fixed" keeps the avatar at 1.0
    """
    if log is None:
        state = "Neutral"
    elif log.mood == "Happy" and log.sleep == "Good":
        state = "Energized"
    elif log.mood == "Happy":
        state = "Happy"
    elif log.sleep == "Poor":
        state = "Tired"
    elif log.mood == "Low" or log.stress == "High":
        state = "Low"
    else:
        state = "Neutral"

    scale = BASE_AVATAR_SCALE
    if scale_mode == "streak" and log is not None:
        scale += min(streak, STREAK_SCALE_CAP) * STREAK_SCALE_STEP

    return AvatarState(state=state, color=AVATAR_COLORS[state], scale=round(scale, 2))


def insight_for(logs: Sequence[Log]) -> str:
    """Pick one insight from simple patterns in the last three logs."""
    if len(logs) < 2:
        return KEEP_LOGGING_INSIGHT

    recent = logs[-INSIGHT_WINDOW:]
    good_sleep = sum(1 for log in recent if log.sleep == "Good")
    happy_mood = sum(1 for log in recent if log.mood == "Happy")
    supplements = sum(1 for log in recent if log.supplements == "Taken")

    if good_sleep == len(recent) and supplements == len(recent):
        return "Your energy peaks when sleep is good + supplements are consistent."
    if happy_mood == len(recent):
        return "You're on a positive streak! Your mood has been consistently good."
    if any(log.stress == "High" for log in recent):
        return "High stress detected in recent logs. Consider our stress management tips."
    if any(log.sleep == "Poor" for log in recent):
        return "Poor sleep patterns detected. Focus on sleep hygiene for better energy."

    return ROTATING_INSIGHTS[len(logs) % len(ROTATING_INSIGHTS)]


def confidence_for(log_count: int) -> ConfidenceLevel:
    if log_count < 3:
        return ConfidenceLevel(level="Low", message=f"Need {3 - log_count} more logs")
    if log_count < 8:
        return ConfidenceLevel(level="Medium", message="Getting clearer")
    return ConfidenceLevel(level="High", message="High confidence")


def consistency_score(logs: Sequence[Log], tz=None) -> float:
    """Distinct calendar days logged plus half a point per complete log."""
    days_logged = len({log.timestamp.astimezone(tz).date() for log in logs})
    complete_logs = sum(1 for log in logs if log.is_complete())
    return days_logged + complete_logs * 0.5


def leaderboard_for(user: User, logs: Sequence[Log], tz=None) -> List[LeaderboardEntry]:
    """The user plus the fixed peers, highest consistency first."""
    user_entry = LeaderboardEntry(
        id=user.id,
        name="You",
        xp=user.xp,
        streak=user.streak,
        consistency_score=consistency_score(logs, tz),
        avatar_type=user.avatar_type,
    )
    entries = [user_entry] + [peer.model_copy() for peer in LEADERBOARD_PEERS]
    # sorted() is stable, ties keep the user ahead of the peers
    return sorted(entries, key=lambda entry: entry.consistency_score, reverse=True)


def _calendar_day(value: datetime, now: datetime):
    return value.astimezone(now.tzinfo).date()


async def update_streak(session: WellnessSession) -> StreakStatus:
    """
    Advance, keep or reset the streak for a log submitted now.

    Same calendar day: unchanged. One elapsed day: +1. More: reset to 1 and
    report broken. Less than 24h but past midnight counts as the next day.

    Raises:
        NoUserFoundError: If there is no user
    """
    user = await session.require_user()
    now = session.now()

    if user.last_log_date is None:
        user.streak = 1
        user.last_log_date = now
        await session.repository.save_user(user)
        return StreakStatus(current=1, broken=False, last_log_date=now)

    last_log = user.last_log_date
    if _calendar_day(last_log, now) == _calendar_day(now, now):
        return StreakStatus(current=user.streak, broken=False, last_log_date=last_log)

    days_since_last_log = (now - last_log).days  # floors, like whole days elapsed
    if days_since_last_log < 0:
        # Clock went backwards; leave the streak alone
        logger.warning(
            "Last log date is in the future, streak unchanged",
            extra={"extra_fields": {"last_log_date": last_log.isoformat(), "now": now.isoformat()}}
        )
        return StreakStatus(current=user.streak, broken=False, last_log_date=last_log)

    if days_since_last_log > 1:
        user.streak = 1
        user.last_log_date = now
        await session.repository.save_user(user)
        logger.info("Streak broken", extra={"extra_fields": {"days_since_last_log": days_since_last_log}})
        return StreakStatus(current=1, broken=True, last_log_date=now)

    user.streak += 1
    user.last_log_date = now
    await session.repository.save_user(user)
    return StreakStatus(current=user.streak, broken=False, last_log_date=now)


async def add_xp(session: WellnessSession, amount: int) -> User:
    """
    Add XP to the current user.

    Raises:
        ValueError: If amount is negative
        NoUserFoundError: If there is no user
    """
    if amount < 0:
        raise ValueError("XP amount must not be negative")
    user = await session.require_user()
    user.xp += amount
    return await session.repository.save_user(user)


async def get_avatar_state(session: WellnessSession, scale_mode: str = "fixed") -> AvatarState:
    user = await session.current_user()
    logs = await session.logs()
    if user is None or not logs:
        return avatar_state_for(None)
    return avatar_state_for(logs[-1], streak=user.streak, scale_mode=scale_mode)


async def generate_insight(session: WellnessSession) -> str:
    return insight_for(await session.logs())


async def get_confidence_level(session: WellnessSession) -> ConfidenceLevel:
    return confidence_for(len(await session.logs()))


async def get_leaderboard(session: WellnessSession) -> List[LeaderboardEntry]:
    user = await session.current_user()
    if user is None:
        return []
    return leaderboard_for(user, await session.logs(), tz=session.now().tzinfo)


def _submission_message(xp_gain: XPGain, entry: LogEntry) -> tuple[str, Optional[str]]:
    honest = entry.has_negative_data()
    if xp_gain.bonus > 0:
        message = f"{xp_gain.reason} +{xp_gain.total} XP!"
        if honest:
            return message, "Honest logging is the first step to improvement!"
        return message, "All categories logged! Bonus activated!"

    message = f"+{xp_gain.total} XP earned!"
    if honest:
        return message, "Thanks for being honest - that takes courage!"
    return message, None


async def submit_log(session: WellnessSession, entry: LogEntry, scale_mode: str = "fixed") -> LogSubmission:
    """
    Record a daily log and apply its rewards.

    Raises:
        NoUserFoundError: If there is no user
    """
    xp_gain = calculate_xp_gain(entry)
    log = await session.add_log(entry)
    await add_xp(session, xp_gain.total)
    streak = await update_streak(session)

    user = await session.current_user()
    if user is None:
        raise NoUserFoundError()

    message, description = _submission_message(xp_gain, entry)
    if streak.current > 1 and not streak.broken:
        description = " ".join(filter(None, [description, f"{streak.current} day streak!"]))

    logger.info(
        "Log submitted",
        extra={"extra_fields": {
            "log_id": log.id,
            "xp_total": xp_gain.total,
            "streak": streak.current,
            "streak_broken": streak.broken,
        }}
    )

    return LogSubmission(
        log=log,
        xp_gain=xp_gain,
        streak=streak,
        user=user,
        avatar=await get_avatar_state(session, scale_mode=scale_mode),
        insight=await generate_insight(session),
        message=message,
        description=description,
    )
