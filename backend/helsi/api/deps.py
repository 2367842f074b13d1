"""
Shared route dependencies.
"""

from fastapi import Depends

from ..config import settings
from ..core.session import WellnessSession
from ..llm import get_llm_provider
from ..services.medical_pipeline import MedicalDocumentPipeline, build_pipeline
from ..storage import get_repository


def get_session() -> WellnessSession:
    """A session over the global repository with the local clock."""
    return WellnessSession(get_repository())


def get_pipeline(session: WellnessSession = Depends(get_session)) -> MedicalDocumentPipeline:
    """The document pipeline wired from settings and the shared LLM provider."""
    return build_pipeline(session, settings, llm_provider=get_llm_provider())
