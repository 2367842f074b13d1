"""
Wellness Session - Explicit context for the single local user.

Every scoring and pipeline operation receives a session instead of reaching
for a global "current user". The clock is injectable so date arithmetic can
be exercised deterministically.
"""

import logging
import uuid
from datetime import datetime, timedelta
from typing import Callable, List, Optional

from ..models import Log, LogEntry, SurveyAnswers, User
from ..storage import WellnessRepository
from .exceptions import NoUserFoundError

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def local_now() -> datetime:
    """Timezone-aware current local time."""
    return datetime.now().astimezone()


def new_id(prefix: str) -> str:
    """Generate a record ID such as ``log_3f2a...``."""
    return f"{prefix}_{uuid.uuid4().hex[:12]}"


class WellnessSession:
    """
    Binds a repository and a clock.
    Holds no cached state: every read goes to the repository.
    """

    def __init__(self, repository: WellnessRepository, clock: Optional[Clock] = None):
        """
        Args:
            repository: Where the user, logs and documents live
            clock: Returns the current aware datetime (defaults to local time)
        """
        self.repository = repository
        self._clock = clock or local_now

    def now(self) -> datetime:
        return self._clock()

    async def current_user(self) -> Optional[User]:
        return await self.repository.get_user()

    async def require_user(self) -> User:
        """
        Return the current user.

        Raises:
            NoUserFoundError: If the onboarding survey has not been completed
        """
        user = await self.repository.get_user()
        if user is None:
            raise NoUserFoundError()
        return user

    async def logs(self) -> List[Log]:
        return await self.repository.get_logs()

    async def complete_survey(self, answers: SurveyAnswers, avatar_type: str) -> User:
        """
        Create the user from the onboarding survey.
        Any previous user is replaced, keeping at most one user in the store.
        """
        user = User(
            id=new_id("user"),
            name="You",
            avatar_type=avatar_type,
            survey_answers=answers,
            xp=0,
            streak=0,
            last_log_date=None,
            created_at=self.now(),
        )
        await self.repository.save_user(user)
        logger.info(
            "User created from survey",
            extra={"extra_fields": {"user_id": user.id, "avatar_type": avatar_type}}
        )
        return user

    async def rename_user(self, name: str) -> User:
        """
        Change the display name.

        Raises:
            ValueError: If the name is blank
            NoUserFoundError: If there is no user
        """
        cleaned = name.strip()
        if not cleaned:
            raise ValueError("Name cannot be empty")

        user = await self.require_user()
        user.name = cleaned
        return await self.repository.save_user(user)

    async def add_log(self, entry: LogEntry) -> Log:
        """Append a log owned by the current user."""
        user = await self.require_user()
        log = Log(
            id=new_id("log"),
            user_id=user.id,
            timestamp=self.now(),
            **entry.model_dump(),
        )
        return await self.repository.append_log(log)

    async def reset(self) -> None:
        """Remove the user together with all logs and medical documents."""
        await self.repository.reset()

    async def seed_demo_data(self) -> User:
        """
        Load a demo user with a week of perfect logs ending today.
        Existing data is overwritten.
        """
        now = self.now()
        user = User(
            id="demo_user",
            name="You",
            avatar_type="Explorer",
            survey_answers=SurveyAnswers(
                sleep_quality="Good",
                fatigue_frequency="Sometimes",
                tracks_health="Sometimes",
                main_goal="Energy",
            ),
            xp=210,
            streak=7,
            last_log_date=now,
            created_at=now - timedelta(days=7),
        )
        logs = [
            Log(
                id=f"log_{i}",
                user_id=user.id,
                timestamp=now - timedelta(days=6 - i),
                food="Clean",
                sleep="Good",
                mood="Happy",
                stress="Low",
                supplements="Taken",
            )
            for i in range(7)
        ]
        await self.repository.save_user(user)
        await self.repository.save_logs(logs)
        logger.info("Demo data seeded", extra={"extra_fields": {"logs": len(logs)}})
        return user
