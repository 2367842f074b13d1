"""
Medical Document Models - Uploaded documents and the data extracted from them.
"""

from datetime import datetime, timezone
from typing import List, Literal, Optional
from pydantic import Field

from .base import CamelModel

FileType = Literal["image", "pdf", "lab_report"]
ProcessingStatus = Literal["processing", "completed", "failed"]
BiomarkerStatus = Literal["normal", "high", "low"]


class Biomarker(CamelModel):
    """A single lab measurement."""
    name: str
    value: float
    unit: str = ""
    reference_range: str = ""
    status: BiomarkerStatus = "normal"


class Medication(CamelModel):
    """A medication mentioned in a document."""
    name: str
    dosage: Optional[str] = None
    frequency: str = ""
    reason: str = ""


class ExtractedMedicalData(CamelModel):
    """Structured content of a medical document."""
    document_type: str
    summary: str = ""
    biomarkers: List[Biomarker] = Field(default_factory=list)
    medications: List[Medication] = Field(default_factory=list)
    diagnoses: List[str] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    extracted_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class MedicalDocument(CamelModel):
    """An uploaded document and its processing state."""
    id: str
    upload_date: datetime
    user_id: str
    file_name: str
    file_type: FileType
    file_size: int = 0
    mime_type: str = ""
    processing_status: ProcessingStatus = "processing"
    extracted_data: Optional[ExtractedMedicalData] = None


class DocumentUploadResult(CamelModel):
    """Outcome of one file in a batch upload."""
    file_name: str
    success: bool
    document: Optional[MedicalDocument] = None
    error: Optional[str] = None
