"""
Medical Extractors - Turn raw document text into structured medical data.

Two variants share one interface: the remote model extractor, and the
deterministic extractor that pattern-matches the text locally. The remote
variant delegates to the deterministic one whenever the model call fails.
"""

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from ..llm.base import LLMProvider
from ..models import Biomarker, ExtractedMedicalData, Medication
from .base_agent import BaseAgent

logger = logging.getLogger(__name__)

DOCUMENT_TYPE = "medical_document"


class MedicalExtractor(ABC):
    """Extracts the ExtractedMedicalData shape from document text."""

    @abstractmethod
    async def extract(self, text: str) -> Dict[str, Any]:
        """
        Extract structured data.

        Returns:
            Raw camelCase structure; callers run validate_medical_data on it
        """
        pass


# Deterministic extraction

@dataclass(frozen=True)
class BiomarkerRule:
    name: str
    pattern: re.Pattern
    unit: str
    reference_range: str


BIOMARKER_RULES = (
    BiomarkerRule("Hemoglobin", re.compile(r"\b(?:hemoglobin|hgb|hb)\s*:?\s*(\d+\.?\d*)\s*g/dl", re.I),
                  "g/dL", "12-16"),
    BiomarkerRule("Cholesterol", re.compile(r"\b(?:cholesterol|chol)\s*:?\s*(\d+\.?\d*)\s*mg/dl", re.I),
                  "mg/dL", "<200"),
    BiomarkerRule("Vitamin D", re.compile(r"\b(?:vitamin\s*d|vit\s*d)\s*:?\s*(\d+\.?\d*)\s*ng/ml", re.I),
                  "ng/mL", "30-100"),
    BiomarkerRule("Glucose", re.compile(r"\b(?:glucose|gluc)\s*:?\s*(\d+\.?\d*)\s*mg/dl", re.I),
                  "mg/dL", "70-100"),
    BiomarkerRule("Creatinine", re.compile(r"\b(?:creatinine|creat)\s*:?\s*(\d+\.?\d*)\s*mg/dl", re.I),
                  "mg/dL", "0.6-1.2"),
)

# (name, pattern with optional dose group, dose unit)
MEDICATION_RULES = (
    ("Vitamin D3", re.compile(r"\b(?:vitamin\s*d3?|vit\s*d3?)\b(?:\s*(\d+)\s*(?:iu|units?)\b)?", re.I), "IU"),
    ("Metformin", re.compile(r"\b(?:metformin|glucophage)\b(?:\s*(\d+)\s*mg\b)?", re.I), "mg"),
    ("Atorvastatin", re.compile(r"\b(?:atorvastatin|lipitor)\b(?:\s*(\d+)\s*mg\b)?", re.I), "mg"),
)

DIAGNOSIS_RULES = (
    ("Vitamin D deficiency", re.compile(r"vitamin\s*d\s*deficiency", re.I)),
    ("Hypercholesterolemia", re.compile(r"hypercholesterolemia|high\s*cholesterol", re.I)),
    ("Diabetes", re.compile(r"\bdiabet(?:es|ic)\b", re.I)),
)

_SECTION_HEADING = re.compile(r"^\s*([A-Za-z][A-Za-z ]*):\s*$")
_LIST_ITEM = re.compile(r"^\s*[-*•]\s*(.+?)\s*$")


def parse_reference_range(reference_range: str) -> Tuple[Optional[float], Optional[float]]:
    """
    Parse "12-16", "<200" or ">40" into (low, high) bounds.
    Unparseable ranges have no bounds.
    """
    text = reference_range.strip()
    try:
        if text.startswith("<"):
            return None, float(text[1:])
        if text.startswith(">"):
            return float(text[1:]), None
        low, _, high = text.partition("-")
        return float(low), float(high) if high else None
    except ValueError:
        return None, None


def classify_value(value: float, reference_range: str) -> str:
    low, high = parse_reference_range(reference_range)
    if low is not None and value < low:
        return "low"
    if high is not None and value > high:
        return "high"
    return "normal"


def _section_items(text: str, heading: str) -> Optional[List[str]]:
    """
    List items under a "Heading:" line, or None if the heading is absent.
    The section ends at the next heading or the first non-list line.
    """
    items: Optional[List[str]] = None
    for line in text.splitlines():
        heading_match = _SECTION_HEADING.match(line)
        if heading_match:
            if items is not None:
                break
            if heading_match.group(1).strip().lower() == heading.lower():
                items = []
            continue
        if items is None:
            continue
        item_match = _LIST_ITEM.match(line)
        if item_match:
            items.append(item_match.group(1))
        elif line.strip():
            break
    return items


class DeterministicExtractor(MedicalExtractor):
    """Regex-based extraction over a fixed vocabulary. Always succeeds."""

    def extract_sync(self, text: str) -> ExtractedMedicalData:
        biomarkers = self._biomarkers(text)
        medications = self._medications(text)
        diagnoses = self._diagnoses(text)
        recommendations = self._recommendations(biomarkers, medications)

        return ExtractedMedicalData(
            document_type=DOCUMENT_TYPE,
            summary=(
                f"Medical document analyzed with {len(biomarkers)} biomarkers, "
                f"{len(medications)} medications, and {len(diagnoses)} diagnoses."
            ),
            biomarkers=biomarkers,
            medications=medications,
            diagnoses=diagnoses,
            recommendations=recommendations,
            extracted_at=datetime.now(timezone.utc),
        )

    async def extract(self, text: str) -> Dict[str, Any]:
        return self.extract_sync(text).to_storage()

    @staticmethod
    def _biomarkers(text: str) -> List[Biomarker]:
        biomarkers = []
        for rule in BIOMARKER_RULES:
            match = rule.pattern.search(text)
            if not match:
                continue
            value = float(match.group(1))
            biomarkers.append(Biomarker(
                name=rule.name,
                value=value,
                unit=rule.unit,
                reference_range=rule.reference_range,
                status=classify_value(value, rule.reference_range),
            ))
        return biomarkers

    @staticmethod
    def _medications(text: str) -> List[Medication]:
        # Prefer the medication list so lab values are not mistaken for prescriptions
        listed = _section_items(text, "Medications")
        lines = listed if listed is not None else text.splitlines()

        medications = []
        for name, pattern, dose_unit in MEDICATION_RULES:
            for line in lines:
                match = pattern.search(line)
                if not match:
                    continue
                dose = match.group(1)
                medications.append(Medication(
                    name=name,
                    dosage=f"{dose} {dose_unit}" if dose else "As prescribed",
                    frequency="Daily",
                    reason="As prescribed by doctor",
                ))
                break
        return medications

    @staticmethod
    def _diagnoses(text: str) -> List[str]:
        return [name for name, pattern in DIAGNOSIS_RULES if pattern.search(text)]

    @staticmethod
    def _recommendations(biomarkers: List[Biomarker], medications: List[Medication]) -> List[str]:
        recommendations = []
        if any(b.status == "low" and "Vitamin D" in b.name for b in biomarkers):
            recommendations.append("Take vitamin D supplements daily")
            recommendations.append("Get more sunlight exposure")
        if any(b.status == "high" and "Cholesterol" in b.name for b in biomarkers):
            recommendations.append("Consider cholesterol medication")
            recommendations.append("Follow a heart-healthy diet")
        if medications:
            recommendations.append("Continue taking prescribed medications")
        return recommendations


# Remote model extraction

EXTRACTION_SYSTEM_PROMPT = (
    "You are a medical AI assistant. Extract structured medical data from documents. "
    "Return only valid JSON."
)

EXTRACTION_PROMPT_TEMPLATE = """Analyze this medical document and extract structured data. Return a JSON object with the following structure:
{{
  "documentType": "medical_document",
  "summary": "Brief summary of the document",
  "biomarkers": [
    {{
      "name": "Biomarker name",
      "value": 123,
      "unit": "mg/dL",
      "referenceRange": "normal range",
      "status": "normal|high|low"
    }}
  ],
  "medications": [
    {{
      "name": "Medication name",
      "dosage": "500mg",
      "frequency": "twice daily",
      "reason": "prescribed for condition"
    }}
  ],
  "diagnoses": ["Diagnosis 1", "Diagnosis 2"],
  "recommendations": ["Recommendation 1", "Recommendation 2"],
  "extractedAt": "{extracted_at}"
}}

Document text: {document_text}"""


class RemoteModelExtractor(BaseAgent, MedicalExtractor):
    """
    Asks the remote model for the structure.
    Any failure of the call itself is logged and handed to the fallback.
    """

    def __init__(
        self,
        llm_provider: Optional[LLMProvider],
        fallback: Optional[MedicalExtractor] = None,
        temperature: float = 0.1,
        max_tokens: int = 2000,
    ):
        super().__init__("MedicalExtractor", EXTRACTION_SYSTEM_PROMPT, llm_provider)
        self.fallback = fallback or DeterministicExtractor()
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def extract(self, text: str) -> Dict[str, Any]:
        prompt = EXTRACTION_PROMPT_TEMPLATE.format(
            extracted_at=datetime.now(timezone.utc).isoformat(),
            document_text=text,
        )
        try:
            content = await self.call_llm(
                prompt,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                response_format={"type": "json_object"},
            )
            if not content:
                raise ValueError("Empty response from model")
            data = self.parse_json(content)
        except Exception as e:
            logger.info(
                f"Remote extraction unavailable, using local extraction: {e}",
                extra={"extra_fields": {"error_type": type(e).__name__}}
            )
            return await self.fallback.extract(text)

        logger.info(
            "Remote extraction completed",
            extra={"extra_fields": {
                "biomarkers": len(data.get("biomarkers") or []),
                "medications": len(data.get("medications") or []),
            }}
        )
        return data


def create_extractor(llm_provider: Optional[LLMProvider], temperature: float = 0.1) -> MedicalExtractor:
    """Pick the extractor once: remote with fallback when a provider exists, else local."""
    if llm_provider is None:
        return DeterministicExtractor()
    return RemoteModelExtractor(llm_provider, DeterministicExtractor(), temperature=temperature)
