"""
Shared test fixtures and configuration.
"""

import pytest
import pytest_asyncio
import os
from datetime import datetime, timedelta, timezone

# Set test environment variables before importing app modules
os.environ["STORAGE_TYPE"] = "memory"
os.environ["LLM_API_KEY"] = ""
os.environ["OPENAI_API_KEY"] = ""
os.environ["OCR_ENABLED"] = "false"
os.environ.setdefault("DEBUG", "true")
os.environ.setdefault("LOCAL_STORAGE_PATH", "/tmp/helsi_test_data")
os.environ.setdefault("LOG_FILE_ENABLED", "false")

from helsi.core.session import WellnessSession  # noqa: E402
from helsi.models import SurveyAnswers  # noqa: E402
from helsi.storage import MemoryStorage, WellnessRepository  # noqa: E402

FIXED_NOW = datetime(2024, 3, 15, 9, 30, tzinfo=timezone.utc)


class FakeClock:
    """Callable clock that only moves when told to."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


@pytest.fixture
def clock():
    return FakeClock(FIXED_NOW)


@pytest.fixture
def repository():
    return WellnessRepository(MemoryStorage())


@pytest.fixture
def session(repository, clock):
    return WellnessSession(repository, clock=clock)


@pytest.fixture
def survey_answers():
    return SurveyAnswers(
        sleep_quality="Poor",
        fatigue_frequency="Often",
        tracks_health="Never",
        main_goal="Energy",
    )


@pytest_asyncio.fixture
async def user(session, survey_answers):
    """A freshly onboarded user with no logs."""
    return await session.complete_survey(survey_answers, "Explorer")
