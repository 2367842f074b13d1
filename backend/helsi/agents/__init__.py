"""Agents module - remote-model agents with local fallbacks."""

from .base_agent import BaseAgent
from .medical_extractor import (
    MedicalExtractor, DeterministicExtractor, RemoteModelExtractor, create_extractor
)
from .insight_agent import (
    InsightWriter, DeterministicInsightWriter, RemoteInsightWriter, create_insight_writer
)

__all__ = [
    'BaseAgent',
    'MedicalExtractor', 'DeterministicExtractor', 'RemoteModelExtractor', 'create_extractor',
    'InsightWriter', 'DeterministicInsightWriter', 'RemoteInsightWriter', 'create_insight_writer',
]
