"""
Tests for the medical document pipeline and its services.
"""

import pytest
from datetime import date
from unittest.mock import AsyncMock, MagicMock

from helsi.agents import (
    DeterministicExtractor, DeterministicInsightWriter, RemoteInsightWriter, RemoteModelExtractor,
)
from helsi.config import Settings
from helsi.core.exceptions import (
    DocumentProcessingError, InvalidMedicalDataError, NoUserFoundError, OCRUnavailableError,
)
from helsi.llm.base import LLMResponse
from helsi.models import ExtractedMedicalData, LogEntry
from helsi.services import (
    MedicalDocumentPipeline, OCRService, TextExtractor, UploadedFile, build_pipeline,
    classify_file_type, generate_simulated_report, validate_medical_data,
)
from helsi.services.medical_pipeline import NO_DOCUMENTS_MESSAGE, STILL_PROCESSING_MESSAGE
from helsi.services.text_extraction import select_scenario

from conftest import FIXED_NOW

VALID_RAW = {
    "documentType": "medical_document",
    "summary": "ok",
    "biomarkers": [],
    "medications": [],
    "diagnoses": [],
    "recommendations": [],
}


def pdf(name: str = "blood_test.pdf") -> UploadedFile:
    return UploadedFile(file_name=name, mime_type="application/pdf", content=b"%PDF-1.4 test")


def make_pipeline(session, extractor=None, text_extractor=None):
    return MedicalDocumentPipeline(
        session=session,
        text_extractor=text_extractor or TextExtractor(),
        extractor=extractor or DeterministicExtractor(),
        insight_writer=DeterministicInsightWriter(),
    )


def mock_provider(content=None, side_effect=None):
    provider = MagicMock()
    provider.chat_completion = AsyncMock(
        return_value=LLMResponse(content=content or "", model="test"),
        side_effect=side_effect,
    )
    return provider


class TestFileClassification:

    @pytest.mark.parametrize("mime,expected", [
        ("image/png", "image"),
        ("image/jpeg", "image"),
        ("application/pdf", "pdf"),
        ("text/plain", "lab_report"),
        ("application/octet-stream", "lab_report"),
    ])
    def test_classify(self, mime, expected):
        assert classify_file_type(mime) == expected

    @pytest.mark.parametrize("name,scenario", [
        ("Blood_Test.PDF", "lab"),
        ("lab-results.png", "lab"),
        ("heart_echo.pdf", "cardiac"),
        ("glucose_log.pdf", "diabetes"),
        ("nutrition.pdf", "nutrition"),
        ("checkup.pdf", "general"),
    ])
    def test_scenario_from_file_name(self, name, scenario):
        assert select_scenario(name) == scenario


class TestSimulatedReport:

    def test_layout(self):
        text = generate_simulated_report("blood_test.pdf", "application/pdf", today=date(2024, 3, 5))
        lines = text.splitlines()
        assert lines[0] == "Complete Blood Count & Metabolic Panel"
        assert "Date: 03/05/2024" in lines
        assert "File: blood_test.pdf" in lines
        assert "File Type: application/pdf" in lines
        assert "- Hemoglobin: 13.8 g/dL (Normal: 12-16)" in lines
        assert text.endswith("simulated medical data for demonstration purposes.")

    def test_general_fallback(self):
        text = generate_simulated_report("scan.pdf", "application/pdf")
        assert text.startswith("General Health Assessment")


class TestTextExtractor:
    """Tests for text source selection."""

    @pytest.mark.asyncio
    async def test_pdf_is_simulated(self):
        text = await TextExtractor().extract(pdf())
        assert text.startswith("Complete Blood Count")

    @pytest.mark.asyncio
    async def test_image_without_ocr_is_simulated(self):
        image = UploadedFile("cardiac.png", "image/png", b"\x89PNG")
        text = await TextExtractor().extract(image)
        assert text.startswith("Cardiovascular Assessment")

    @pytest.mark.asyncio
    async def test_image_uses_ocr(self):
        ocr = MagicMock()
        ocr.extract_text = AsyncMock(return_value="Glucose: 120 mg/dL")
        image = UploadedFile("scan.jpg", "image/jpeg", b"jpegdata")

        assert await TextExtractor(ocr).extract(image) == "Glucose: 120 mg/dL"
        ocr.extract_text.assert_awaited_once_with(b"jpegdata", "image/jpeg")

    @pytest.mark.asyncio
    async def test_ocr_failure_falls_back(self):
        ocr = MagicMock()
        ocr.extract_text = AsyncMock(side_effect=OCRUnavailableError("nothing read"))
        image = UploadedFile("vitamin.png", "image/png", b"png")

        text = await TextExtractor(ocr).extract(image)
        assert text.startswith("Nutritional Assessment")

    @pytest.mark.asyncio
    async def test_pdf_skips_ocr(self):
        ocr = MagicMock()
        ocr.extract_text = AsyncMock(return_value="unused")
        await TextExtractor(ocr).extract(pdf())
        ocr.extract_text.assert_not_called()


class TestOCRService:

    @pytest.mark.asyncio
    async def test_without_provider(self):
        with pytest.raises(OCRUnavailableError):
            await OCRService(None).extract_text(b"png", "image/png")

    @pytest.mark.asyncio
    async def test_empty_image(self):
        with pytest.raises(OCRUnavailableError):
            await OCRService(mock_provider("text")).extract_text(b"", "image/png")

    @pytest.mark.asyncio
    async def test_empty_reply(self):
        with pytest.raises(OCRUnavailableError):
            await OCRService(mock_provider("   ")).extract_text(b"png", "image/png")

    @pytest.mark.asyncio
    async def test_sends_image_as_data_uri(self):
        provider = mock_provider("  Hemoglobin: 14 g/dL \n")
        text = await OCRService(provider).extract_text(b"abc", "image/png")

        assert text == "Hemoglobin: 14 g/dL"
        user_message = provider.chat_completion.call_args.args[0][1]
        assert user_message.content[0]["image_url"]["url"] == "data:image/png;base64,YWJj"
        assert provider.chat_completion.call_args.kwargs["temperature"] == 0.0


class TestValidation:
    """Tests for validate_medical_data."""

    def test_valid_dict(self):
        data = validate_medical_data(VALID_RAW)
        assert isinstance(data, ExtractedMedicalData)
        assert data.document_type == "medical_document"

    def test_snake_case_keys(self):
        raw = {**VALID_RAW}
        raw["document_type"] = raw.pop("documentType")
        assert validate_medical_data(raw).document_type == "medical_document"

    def test_model_passes_through(self):
        data = ExtractedMedicalData(document_type="x")
        assert validate_medical_data(data) is data

    @pytest.mark.parametrize("missing", ["biomarkers", "medications", "diagnoses", "recommendations"])
    def test_missing_list(self, missing):
        raw = {k: v for k, v in VALID_RAW.items() if k != missing}
        with pytest.raises(InvalidMedicalDataError, match=missing):
            validate_medical_data(raw)

    def test_list_field_of_wrong_type(self):
        with pytest.raises(InvalidMedicalDataError):
            validate_medical_data({**VALID_RAW, "diagnoses": "none"})

    def test_document_type_must_be_string(self):
        with pytest.raises(InvalidMedicalDataError):
            validate_medical_data({**VALID_RAW, "documentType": 5})

    def test_not_an_object(self):
        with pytest.raises(InvalidMedicalDataError):
            validate_medical_data(None)
        with pytest.raises(InvalidMedicalDataError):
            validate_medical_data([VALID_RAW])

    def test_bad_biomarker(self):
        raw = {**VALID_RAW, "biomarkers": [{"name": "Glucose", "value": "high"}]}
        with pytest.raises(InvalidMedicalDataError):
            validate_medical_data(raw)

    def test_invalid_data_is_a_value_error(self):
        assert issubclass(InvalidMedicalDataError, ValueError)


class TestProcessDocument:
    """Tests for MedicalDocumentPipeline.process_document."""

    @pytest.mark.asyncio
    async def test_blood_test_completes(self, session, user):
        document = await make_pipeline(session).process_document(pdf("blood_test.pdf"))

        assert document.processing_status == "completed"
        assert document.file_type == "pdf"
        assert document.file_size == len(b"%PDF-1.4 test")
        assert document.user_id == user.id
        assert document.upload_date == FIXED_NOW
        assert document.extracted_data.biomarkers

        stored = await session.repository.get_medical_document(document.id)
        assert stored.processing_status == "completed"
        assert stored.extracted_data == document.extracted_data

    @pytest.mark.asyncio
    async def test_requires_user(self, session):
        with pytest.raises(NoUserFoundError):
            await make_pipeline(session).process_document(pdf())
        assert await session.repository.get_medical_documents() == []

    @pytest.mark.asyncio
    async def test_invalid_extraction_fails_document(self, session, user):
        extractor = MagicMock()
        extractor.extract = AsyncMock(return_value={"documentType": "x", "biomarkers": []})

        with pytest.raises(DocumentProcessingError) as exc_info:
            await make_pipeline(session, extractor=extractor).process_document(pdf())

        assert str(exc_info.value) == "Failed to process medical document. Please try again."
        [stored] = await session.repository.get_medical_documents()
        assert stored.processing_status == "failed"
        assert stored.extracted_data is None

    @pytest.mark.asyncio
    async def test_text_extraction_error_fails_document(self, session, user):
        text_extractor = MagicMock()
        text_extractor.extract = AsyncMock(side_effect=RuntimeError("unreadable"))

        with pytest.raises(DocumentProcessingError):
            await make_pipeline(session, text_extractor=text_extractor).process_document(pdf())

        [stored] = await session.repository.get_medical_documents()
        assert stored.processing_status == "failed"

    @pytest.mark.asyncio
    async def test_remote_failure_still_completes(self, session, user):
        extractor = RemoteModelExtractor(mock_provider(side_effect=RuntimeError("HTTP 503")))
        document = await make_pipeline(session, extractor=extractor).process_document(pdf())

        assert document.processing_status == "completed"
        assert document.extracted_data.summary.startswith("Medical document analyzed")


class TestProcessBatch:

    @pytest.mark.asyncio
    async def test_failure_does_not_stop_batch(self, session, user):
        extractor = MagicMock()
        extractor.extract = AsyncMock(side_effect=[VALID_RAW, {"documentType": "x"}, VALID_RAW])
        files = [pdf("a.pdf"), pdf("b.pdf"), pdf("c.pdf")]

        results = await make_pipeline(session, extractor=extractor).process_batch(files)

        assert [r.file_name for r in results] == ["a.pdf", "b.pdf", "c.pdf"]
        assert [r.success for r in results] == [True, False, True]
        assert results[1].document is None
        assert results[1].error == "Failed to process medical document. Please try again."
        statuses = [d.processing_status for d in await session.repository.get_medical_documents()]
        assert statuses == ["completed", "failed", "completed"]

    @pytest.mark.asyncio
    async def test_requires_user(self, session):
        with pytest.raises(NoUserFoundError):
            await make_pipeline(session).process_batch([pdf()])


class TestMedicalInsights:
    """Tests for generate_medical_insights."""

    @pytest.mark.asyncio
    async def test_no_documents(self, session, user):
        assert await make_pipeline(session).generate_medical_insights() == NO_DOCUMENTS_MESSAGE

    @pytest.mark.asyncio
    async def test_only_failed_documents(self, session, user):
        extractor = MagicMock()
        extractor.extract = AsyncMock(return_value={})
        pipeline = make_pipeline(session, extractor=extractor)
        with pytest.raises(DocumentProcessingError):
            await pipeline.process_document(pdf())

        assert await pipeline.generate_medical_insights() == STILL_PROCESSING_MESSAGE

    @pytest.mark.asyncio
    async def test_uses_latest_completed_document(self, session, user):
        pipeline = make_pipeline(session)
        await pipeline.process_document(pdf("blood_test.pdf"))
        await pipeline.process_document(pdf("vitamin_panel.pdf"))
        await session.add_log(LogEntry(sleep="Good", supplements="Taken"))

        text = await pipeline.generate_medical_insights()

        assert "Vitamin D: 22 ng/mL (LOW)" in text
        assert "• Good sleep patterns recorded 1 times" in text


class TestBuildPipeline:

    def test_demo_mode(self, session):
        config = Settings(llm_api_key=None, openai_api_key=None, ocr_enabled=True)
        pipeline = build_pipeline(session, config)
        assert isinstance(pipeline.extractor, DeterministicExtractor)
        assert isinstance(pipeline.insight_writer, DeterministicInsightWriter)
        assert pipeline.text_extractor.ocr is None

    def test_with_api_key(self, session):
        config = Settings(llm_api_key="sk-test", ocr_enabled=True, llm_temperature=0.2)
        pipeline = build_pipeline(session, config)
        assert isinstance(pipeline.extractor, RemoteModelExtractor)
        assert pipeline.extractor.temperature == 0.2
        assert isinstance(pipeline.insight_writer, RemoteInsightWriter)
        assert isinstance(pipeline.text_extractor.ocr, OCRService)

    def test_placeholder_key_is_demo_mode(self, session):
        config = Settings(llm_api_key="your-openai-api-key-here")
        assert config.demo_mode is True
        assert isinstance(build_pipeline(session, config).extractor, DeterministicExtractor)

    def test_shared_provider(self, session):
        provider = mock_provider("{}")
        config = Settings(ocr_enabled=False)
        pipeline = build_pipeline(session, config, llm_provider=provider)
        assert pipeline.extractor.fallback is not None
        assert pipeline.text_extractor.ocr is None
