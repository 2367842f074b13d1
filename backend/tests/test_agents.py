"""
Unit tests for the medical extractors and insight writers.
"""

import json
import pytest
from datetime import date, timedelta
from unittest.mock import AsyncMock, MagicMock

from helsi.agents import (
    BaseAgent, DeterministicExtractor, DeterministicInsightWriter, RemoteInsightWriter,
    RemoteModelExtractor, create_extractor, create_insight_writer,
)
from helsi.agents.medical_extractor import classify_value, parse_reference_range
from helsi.core.exceptions import LLMUnavailableError, RateLimitExceededError
from helsi.llm.base import LLMResponse
from helsi.models import Biomarker, ExtractedMedicalData, Log, Medication
from helsi.services.text_extraction import generate_simulated_report

from conftest import FIXED_NOW

TODAY = date(2024, 3, 15)


def report_for(file_name: str) -> str:
    return generate_simulated_report(file_name, "application/pdf", today=TODAY)


def mock_provider(content=None, side_effect=None):
    provider = MagicMock()
    provider.chat_completion = AsyncMock(
        return_value=LLMResponse(content=content or "", model="test"),
        side_effect=side_effect,
    )
    return provider


class TestReferenceRanges:

    @pytest.mark.parametrize("text,bounds", [
        ("12-16", (12.0, 16.0)),
        ("0.6-1.2", (0.6, 1.2)),
        ("<200", (None, 200.0)),
        (">40", (40.0, None)),
        ("see notes", (None, None)),
    ])
    def test_parse(self, text, bounds):
        assert parse_reference_range(text) == bounds

    def test_classify(self):
        assert classify_value(11.0, "12-16") == "low"
        assert classify_value(14.0, "12-16") == "normal"
        assert classify_value(250, "<200") == "high"
        assert classify_value(10, "<200") == "normal"
        assert classify_value(1, "unknown") == "normal"


class TestDeterministicExtractor:
    """Tests for the regex extractor over the simulated reports."""

    def setup_method(self):
        self.extractor = DeterministicExtractor()

    def test_blood_panel(self):
        data = self.extractor.extract_sync(report_for("blood_test.pdf"))
        names = {b.name: b for b in data.biomarkers}
        assert set(names) == {"Hemoglobin", "Cholesterol", "Glucose", "Creatinine"}
        assert names["Hemoglobin"].value == 13.8
        assert names["Hemoglobin"].unit == "g/dL"
        assert all(b.status == "normal" for b in data.biomarkers)
        assert data.medications == []
        assert data.diagnoses == []
        assert data.summary == "Medical document analyzed with 4 biomarkers, 0 medications, and 0 diagnoses."
        assert data.document_type == "medical_document"

    def test_nutrition_panel(self):
        data = self.extractor.extract_sync(report_for("vitamin_panel.pdf"))
        vitamin_d = next(b for b in data.biomarkers if b.name == "Vitamin D")
        assert vitamin_d.value == 22
        assert vitamin_d.status == "low"
        assert vitamin_d.reference_range == "30-100"
        assert [(m.name, m.dosage, m.frequency) for m in data.medications] == [
            ("Vitamin D3", "2000 IU", "Daily")
        ]
        assert data.recommendations == [
            "Take vitamin D supplements daily",
            "Get more sunlight exposure",
            "Continue taking prescribed medications",
        ]
        assert data.diagnoses == ["Vitamin D deficiency"]

    def test_diabetes_report(self):
        data = self.extractor.extract_sync(report_for("diabetes_followup.pdf"))
        glucose = next(b for b in data.biomarkers if b.name == "Glucose")
        assert glucose.value == 108
        assert glucose.status == "high"
        assert [(m.name, m.dosage, m.frequency) for m in data.medications] == [
            ("Metformin", "500 mg", "Daily")
        ]
        assert data.diagnoses == ["Diabetes"]

    def test_cardiac_report(self):
        data = self.extractor.extract_sync(report_for("cardiac_exam.pdf"))
        cholesterol = next(b for b in data.biomarkers if b.name == "Cholesterol")
        assert cholesterol.status == "high"
        assert [m.name for m in data.medications] == ["Atorvastatin"]
        assert data.diagnoses == []
        assert "Consider cholesterol medication" in data.recommendations
        assert "Follow a heart-healthy diet" in data.recommendations

    def test_free_text(self):
        data = self.extractor.extract_sync(
            "Patient has high cholesterol and a diabetic history. Taking Lipitor daily."
        )
        assert data.biomarkers == []
        assert data.diagnoses == ["Hypercholesterolemia", "Diabetes"]
        assert [(m.name, m.dosage) for m in data.medications] == [("Atorvastatin", "As prescribed")]

    @pytest.mark.parametrize("file_name", [
        "blood_test.pdf", "cardiac_exam.pdf", "diabetes_followup.pdf", "vitamin_panel.pdf", "checkup.pdf",
    ])
    def test_diagnoses_come_from_vocabulary(self, file_name):
        data = self.extractor.extract_sync(report_for(file_name))
        assert set(data.diagnoses) <= {"Vitamin D deficiency", "Hypercholesterolemia", "Diabetes"}
        assert all(m.frequency == "Daily" for m in data.medications)

    def test_empty_text(self):
        data = self.extractor.extract_sync("")
        assert data.biomarkers == []
        assert data.medications == []
        assert data.diagnoses == []
        assert data.recommendations == []

    @pytest.mark.asyncio
    async def test_extract_returns_camel_case(self):
        raw = await self.extractor.extract(report_for("blood_test.pdf"))
        assert raw["documentType"] == "medical_document"
        assert raw["biomarkers"][0]["referenceRange"]
        assert "extractedAt" in raw


class TestBaseAgent:

    @pytest.mark.asyncio
    async def test_without_provider(self):
        agent = BaseAgent("Test", "system")
        assert agent.has_llm is False
        with pytest.raises(LLMUnavailableError):
            await agent.call_llm("hello")

    @pytest.mark.asyncio
    async def test_sends_system_and_user_messages(self):
        provider = mock_provider("ok")
        agent = BaseAgent("Test", "be brief", provider)
        assert await agent.call_llm("hello", temperature=0.2) == "ok"

        messages = provider.chat_completion.call_args.args[0]
        assert [m.role for m in messages] == ["system", "user"]
        assert messages[0].content == "be brief"
        assert provider.chat_completion.call_args.kwargs["temperature"] == 0.2

    @pytest.mark.parametrize("content", [
        '{"a": 1}',
        '```json\n{"a": 1}\n```',
        '```\n{"a": 1}\n```',
    ])
    def test_parse_json(self, content):
        assert BaseAgent.parse_json(content) == {"a": 1}

    def test_parse_json_rejects_non_object(self):
        with pytest.raises(ValueError):
            BaseAgent.parse_json("[1, 2]")
        with pytest.raises(ValueError):
            BaseAgent.parse_json("not json")


class TestRemoteModelExtractor:
    """Tests for the remote extractor and its fallback."""

    @pytest.mark.asyncio
    async def test_returns_model_json(self):
        reply = {
            "documentType": "lab_report",
            "summary": "Remote summary",
            "biomarkers": [{"name": "HbA1c", "value": 6.8, "unit": "%",
                            "referenceRange": "<5.7", "status": "high"}],
            "medications": [],
            "diagnoses": ["Pre-diabetes"],
            "recommendations": [],
        }
        provider = mock_provider(f"```json\n{json.dumps(reply)}\n```")
        extractor = RemoteModelExtractor(provider)

        data = await extractor.extract("HbA1c: 6.8%")

        assert data == reply
        kwargs = provider.chat_completion.call_args.kwargs
        assert kwargs["response_format"] == {"type": "json_object"}
        assert kwargs["temperature"] == 0.1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("provider", [
        mock_provider(side_effect=RuntimeError("HTTP 500")),
        mock_provider(side_effect=RateLimitExceededError("limit")),
        mock_provider("I cannot help with that"),
        mock_provider(""),
    ])
    async def test_falls_back_to_local_extraction(self, provider):
        extractor = RemoteModelExtractor(provider, DeterministicExtractor())
        data = await extractor.extract(report_for("blood_test.pdf"))
        assert data["documentType"] == "medical_document"
        assert data["summary"].startswith("Medical document analyzed with 4 biomarkers")

    @pytest.mark.asyncio
    async def test_malformed_reply_is_passed_through(self):
        provider = mock_provider('{"documentType": "x", "biomarkers": "none"}')
        data = await RemoteModelExtractor(provider).extract("text")
        assert data["biomarkers"] == "none"

    def test_create_extractor(self):
        assert isinstance(create_extractor(None), DeterministicExtractor)
        remote = create_extractor(mock_provider("{}"), temperature=0.0)
        assert isinstance(remote, RemoteModelExtractor)
        assert remote.temperature == 0.0
        assert isinstance(remote.fallback, DeterministicExtractor)


def sample_data() -> ExtractedMedicalData:
    return ExtractedMedicalData(
        document_type="medical_document",
        summary="Nutrition panel",
        biomarkers=[
            Biomarker(name="Vitamin D", value=22, unit="ng/mL", reference_range="30-100", status="low"),
            Biomarker(name="Glucose", value=88, unit="mg/dL", reference_range="70-100", status="normal"),
        ],
        medications=[Medication(name="Vitamin D3", dosage="2000 IU", frequency="Daily")],
        diagnoses=["Vitamin D deficiency"],
        recommendations=["Get more sunlight exposure"],
    )


def make_logs(count: int, **fields):
    return [
        Log(id=f"log_{i}", user_id="user_1", timestamp=FIXED_NOW + timedelta(days=i), **fields)
        for i in range(count)
    ]


class TestDeterministicInsightWriter:
    """Tests for the locally composed report."""

    def test_all_sections(self):
        text = DeterministicInsightWriter().compose(
            sample_data(), make_logs(3, sleep="Good", supplements="Taken")
        )
        assert "📋 Document Analysis\nNutrition panel" in text
        assert "Found 1 value(s) outside normal range:\n• Vitamin D: 22 ng/mL (LOW)" in text
        assert "✅ Normal Results\n1 biomarker(s) are within healthy range." in text
        assert "• Vitamin D3 (2000 IU) - Daily" in text
        assert "🏥 Medical Diagnoses\nVitamin D deficiency" in text
        assert "• You've been taking supplements 3 times recently" in text
        assert "• Good sleep patterns recorded 3 times" in text
        assert text.endswith("• Get more sunlight exposure")

    def test_lifestyle_uses_last_seven_logs(self):
        logs = make_logs(10, supplements="Taken")
        text = DeterministicInsightWriter().compose(sample_data(), logs)
        assert "taking supplements 7 times recently" in text
        assert "Good sleep patterns" not in text

    def test_nothing_to_report(self):
        text = DeterministicInsightWriter().compose(
            ExtractedMedicalData(document_type="medical_document"), []
        )
        assert text.startswith("📄 Document Processed")


class TestRemoteInsightWriter:

    @pytest.mark.asyncio
    async def test_uses_model_reply(self):
        provider = mock_provider("- Vitamin D is low")
        writer = RemoteInsightWriter(provider)
        assert await writer.write(sample_data(), make_logs(2, mood="Happy")) == "- Vitamin D is low"

        kwargs = provider.chat_completion.call_args.kwargs
        assert kwargs["temperature"] == 0.3
        assert kwargs["max_tokens"] == 1500
        prompt = provider.chat_completion.call_args.args[0][1].content
        assert '"referenceRange": "30-100"' in prompt

    @pytest.mark.asyncio
    async def test_falls_back_on_error(self):
        writer = RemoteInsightWriter(mock_provider(side_effect=RuntimeError("down")))
        text = await writer.write(sample_data(), [])
        assert text.startswith("📋 Document Analysis")

    def test_create_insight_writer(self):
        assert isinstance(create_insight_writer(None), DeterministicInsightWriter)
        assert isinstance(create_insight_writer(mock_provider("x")), RemoteInsightWriter)
