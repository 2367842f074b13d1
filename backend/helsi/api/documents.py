"""
Medical Documents API endpoints - Upload, list and insights.
"""

import logging
from fastapi import APIRouter, HTTPException, Depends, status, UploadFile, File
from typing import List

from ..core import NoUserFoundError, WellnessSession
from ..models import DocumentUploadResult, MedicalDocument
from ..services.medical_pipeline import MedicalDocumentPipeline
from ..services.text_extraction import UploadedFile
from .deps import get_pipeline, get_session

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/documents", tags=["documents"])


@router.post("", response_model=List[DocumentUploadResult])
async def upload_documents(
    files: List[UploadFile] = File(...),
    pipeline: MedicalDocumentPipeline = Depends(get_pipeline)
):
    """
    Upload one or more medical documents.

    Files are processed one after another; a failed file is reported in its
    result entry and does not stop the rest.

    Args:
        files: Uploaded files (images, PDFs or lab reports)
        pipeline: Document pipeline

    Returns:
        List[DocumentUploadResult]: One entry per file, in upload order
    """
    uploads = []
    for upload in files:
        content = await upload.read()
        uploads.append(UploadedFile(
            file_name=upload.filename or "document",
            mime_type=upload.content_type or "application/octet-stream",
            content=content,
        ))

    try:
        results = await pipeline.process_batch(uploads)
    except NoUserFoundError as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))

    failed = sum(1 for result in results if not result.success)
    logger.info(
        f"Processed {len(results)} document(s)",
        extra={"extra_fields": {"documents": len(results), "failed": failed}}
    )

    if failed == len(results):
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=results[0].error
        )
    return results


@router.get("", response_model=List[MedicalDocument])
async def list_documents(session: WellnessSession = Depends(get_session)):
    """All uploaded documents, oldest first."""
    return await session.repository.get_medical_documents()


@router.get("/insights")
async def get_document_insights(pipeline: MedicalDocumentPipeline = Depends(get_pipeline)):
    """
    Insights for the latest processed document combined with the daily logs.

    Returns:
        dict: {"insights": str}
    """
    return {"insights": await pipeline.generate_medical_insights()}
