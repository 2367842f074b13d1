"""
Insight Writers - Compose a readable report from extracted medical data and recent logs.
"""

import json
import logging
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from ..llm.base import LLMProvider
from ..models import ExtractedMedicalData, Log
from .base_agent import BaseAgent

logger = logging.getLogger(__name__)

LIFESTYLE_WINDOW = 7


class InsightWriter(ABC):
    """Writes free-text insights for one document."""

    @abstractmethod
    async def write(self, data: ExtractedMedicalData, logs: Sequence[Log]) -> str:
        pass


class DeterministicInsightWriter(InsightWriter):
    """Builds the report section by section from the data itself."""

    def compose(self, data: ExtractedMedicalData, logs: Sequence[Log]) -> str:
        sections: List[str] = []

        if data.summary:
            sections.append(f"📋 Document Analysis\n{data.summary}")

        abnormal = [b for b in data.biomarkers if b.status != "normal"]
        normal = [b for b in data.biomarkers if b.status == "normal"]
        if abnormal:
            lines = [f"🔬 Biomarker Analysis\nFound {len(abnormal)} value(s) outside normal range:"]
            lines += [
                f"• {marker.name}: {marker.value:g} {marker.unit} ({marker.status.upper()})"
                for marker in abnormal
            ]
            sections.append("\n".join(lines))
        if normal:
            sections.append(f"✅ Normal Results\n{len(normal)} biomarker(s) are within healthy range.")

        if data.medications:
            lines = [
                f"💊 Medications Identified\n{len(data.medications)} medication(s) found in your document:"
            ]
            for med in data.medications:
                line = f"• {med.name}"
                if med.dosage:
                    line += f" ({med.dosage})"
                if med.frequency:
                    line += f" - {med.frequency}"
                lines.append(line)
            sections.append("\n".join(lines))

        if data.diagnoses:
            sections.append(f"🏥 Medical Diagnoses\n{', '.join(data.diagnoses)}")

        lifestyle = self._lifestyle_section(logs)
        if lifestyle:
            sections.append(lifestyle)

        if data.recommendations:
            lines = ["💡 Recommendations\nBased on your document:"]
            lines += [f"• {rec}" for rec in data.recommendations]
            sections.append("\n".join(lines))

        if not sections:
            sections.append(
                "📄 Document Processed\nYour medical document has been analyzed. Continue logging "
                "your daily habits to see how they connect with your health data."
            )

        return "\n\n".join(sections)

    async def write(self, data: ExtractedMedicalData, logs: Sequence[Log]) -> str:
        return self.compose(data, logs)

    @staticmethod
    def _lifestyle_section(logs: Sequence[Log]) -> Optional[str]:
        recent = logs[-LIFESTYLE_WINDOW:]
        supplements = sum(1 for log in recent if log.supplements == "Taken")
        good_sleep = sum(1 for log in recent if log.sleep == "Good")
        if not supplements and not good_sleep:
            return None

        lines = ["📊 Lifestyle Connection"]
        if supplements:
            lines.append(f"• You've been taking supplements {supplements} times recently")
        if good_sleep:
            lines.append(f"• Good sleep patterns recorded {good_sleep} times")
        return "\n".join(lines)


INSIGHT_SYSTEM_PROMPT = (
    "You are a medical AI assistant. Generate personalized health insights based on medical "
    "data and lifestyle logs. Be specific and actionable. This is informational only, "
    "not medical advice."
)

INSIGHT_PROMPT_TEMPLATE = """Based on this medical data and user lifestyle logs, generate personalized health insights:

Medical Data: {medical_data}
User Logs: {user_logs}

Provide insights in the following format:
- Document Summary
- Biomarker Analysis (highlight abnormal values)
- Medications (list and explain)
- Diagnoses (explain conditions)
- Lifestyle Connection (connect to user logs)
- Recommendations (actionable advice)

Use bullet points and be specific about the medical data."""


class RemoteInsightWriter(BaseAgent, InsightWriter):
    """Asks the remote model for the report; falls back to the local composer."""

    def __init__(
        self,
        llm_provider: Optional[LLMProvider],
        fallback: Optional[InsightWriter] = None,
        temperature: float = 0.3,
        max_tokens: int = 1500,
    ):
        super().__init__("InsightWriter", INSIGHT_SYSTEM_PROMPT, llm_provider)
        self.fallback = fallback or DeterministicInsightWriter()
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def write(self, data: ExtractedMedicalData, logs: Sequence[Log]) -> str:
        prompt = INSIGHT_PROMPT_TEMPLATE.format(
            medical_data=json.dumps(data.to_storage(), indent=2, ensure_ascii=False),
            user_logs=json.dumps([log.to_storage() for log in logs[-LIFESTYLE_WINDOW:]],
                                 indent=2, ensure_ascii=False),
        )
        try:
            content = await self.call_llm(prompt, temperature=self.temperature, max_tokens=self.max_tokens)
        except Exception as e:
            logger.info(
                f"Remote insights unavailable, composing locally: {e}",
                extra={"extra_fields": {"error_type": type(e).__name__}}
            )
            return await self.fallback.write(data, logs)

        return content or "Unable to generate insights"


def create_insight_writer(llm_provider: Optional[LLMProvider]) -> InsightWriter:
    if llm_provider is None:
        return DeterministicInsightWriter()
    return RemoteInsightWriter(llm_provider, DeterministicInsightWriter())
