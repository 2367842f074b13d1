"""
Log Models - One daily check-in with up to five categories.
"""

from datetime import datetime
from typing import Literal, Optional

from .base import CamelModel

FoodValue = Literal["Clean", "Gluten", "Sugar", "Alcohol"]
SleepValue = Literal["Good", "Poor"]
MoodValue = Literal["Happy", "Neutral", "Low"]
StressValue = Literal["Low", "Medium", "High"]
SupplementsValue = Literal["Taken", "Skipped"]

CATEGORIES = ("food", "sleep", "mood", "stress", "supplements")


class LogEntry(CamelModel):
    """The category values of a log, as submitted by the user."""
    food: Optional[FoodValue] = None
    sleep: Optional[SleepValue] = None
    mood: Optional[MoodValue] = None
    stress: Optional[StressValue] = None
    supplements: Optional[SupplementsValue] = None

    def filled_categories(self) -> int:
        """Number of categories that have a value."""
        return sum(1 for category in CATEGORIES if getattr(self, category))

    def is_complete(self) -> bool:
        return self.filled_categories() == len(CATEGORIES)

    def has_negative_data(self) -> bool:
        """True when the user honestly logged a bad day in any category."""
        return (
            self.mood == "Low"
            or self.stress == "High"
            or self.sleep == "Poor"
            or self.food == "Alcohol"
            or self.supplements == "Skipped"
        )


class Log(LogEntry):
    """A stored log owned by the current user."""
    id: str
    user_id: str
    timestamp: datetime
