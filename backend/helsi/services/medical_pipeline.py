"""
Medical Document Pipeline - Upload, extraction, validation and insights.

Each document moves processing -> completed or processing -> failed, and both
outcomes are final. Files in a batch are handled one after another.
"""

import logging
from typing import List, Optional, Sequence

from ..agents import (
    InsightWriter,
    MedicalExtractor,
    create_extractor,
    create_insight_writer,
)
from ..config.settings import Settings
from ..core.exceptions import DocumentProcessingError, NoUserFoundError
from ..core.session import WellnessSession, new_id
from ..llm import provider_from_settings
from ..models import DocumentUploadResult, MedicalDocument
from .ocr import OCRService
from .text_extraction import TextExtractor, UploadedFile, classify_file_type
from .validation import validate_medical_data

logger = logging.getLogger(__name__)

NO_DOCUMENTS_MESSAGE = "Upload your medical documents to get AI-powered health insights!"
STILL_PROCESSING_MESSAGE = "Your medical documents are still being processed. Check back soon!"


class MedicalDocumentPipeline:
    """Runs uploaded files through text extraction, structured extraction and validation."""

    def __init__(
        self,
        session: WellnessSession,
        text_extractor: TextExtractor,
        extractor: MedicalExtractor,
        insight_writer: InsightWriter,
    ):
        self.session = session
        self.text_extractor = text_extractor
        self.extractor = extractor
        self.insight_writer = insight_writer

    async def process_document(self, file: UploadedFile) -> MedicalDocument:
        """
        Process one uploaded file.

        Args:
            file: The uploaded file

        Returns:
            The completed document

        Raises:
            NoUserFoundError: If there is no current user
            DocumentProcessingError: If any stage fails; the stored document is marked failed
        """
        user = await self.session.require_user()
        repository = self.session.repository

        document = MedicalDocument(
            id=new_id("doc"),
            upload_date=self.session.now(),
            user_id=user.id,
            file_name=file.file_name,
            file_type=classify_file_type(file.mime_type),
            file_size=file.size,
            mime_type=file.mime_type,
            processing_status="processing",
        )
        await repository.add_medical_document(document)
        logger.info(
            "Medical document received",
            extra={"extra_fields": {
                "document_id": document.id,
                "file_type": document.file_type,
                "file_size": document.file_size,
            }}
        )

        try:
            text = await self.text_extractor.extract(file)
            raw = await self.extractor.extract(text)
            extracted = validate_medical_data(raw)
        except Exception as e:
            logger.error(
                f"Medical document processing failed: {str(e)}",
                extra={"extra_fields": {"document_id": document.id, "error_type": type(e).__name__}},
                exc_info=True
            )
            await repository.update_medical_document(
                document.id, processing_status="failed", extracted_data=None
            )
            raise DocumentProcessingError() from e

        completed = await repository.update_medical_document(
            document.id, processing_status="completed", extracted_data=extracted
        )
        logger.info(
            "Medical document completed",
            extra={"extra_fields": {
                "document_id": document.id,
                "biomarkers": len(extracted.biomarkers),
                "medications": len(extracted.medications),
            }}
        )
        return completed

    async def process_batch(self, files: Sequence[UploadedFile]) -> List[DocumentUploadResult]:
        """
        Process files sequentially. A failed file does not stop the batch.

        Raises:
            NoUserFoundError: If there is no current user
        """
        results: List[DocumentUploadResult] = []
        for file in files:
            try:
                document = await self.process_document(file)
                results.append(DocumentUploadResult(file_name=file.file_name, success=True, document=document))
            except NoUserFoundError:
                raise
            except DocumentProcessingError as e:
                results.append(DocumentUploadResult(file_name=file.file_name, success=False, error=str(e)))
        return results

    async def generate_medical_insights(self) -> str:
        """Insights for the most recently completed document combined with all logs."""
        documents = await self.session.repository.get_medical_documents()
        if not documents:
            return NO_DOCUMENTS_MESSAGE

        completed = [d for d in documents if d.processing_status == "completed" and d.extracted_data]
        if not completed:
            return STILL_PROCESSING_MESSAGE

        latest = completed[-1]
        logs = await self.session.logs()
        return await self.insight_writer.write(latest.extracted_data, logs)


def build_pipeline(session: WellnessSession, config: Settings, llm_provider=None) -> MedicalDocumentPipeline:
    """
    Wire the pipeline from configuration.

    Args:
        session: Wellness session
        config: Application settings
        llm_provider: Optional provider override; created from settings when None
    """
    provider = llm_provider if llm_provider is not None else provider_from_settings(config)

    ocr: Optional[OCRService] = None
    if config.ocr_enabled and provider is not None:
        ocr = OCRService(provider)

    return MedicalDocumentPipeline(
        session=session,
        text_extractor=TextExtractor(ocr),
        extractor=create_extractor(provider, temperature=config.llm_temperature),
        insight_writer=create_insight_writer(provider),
    )
