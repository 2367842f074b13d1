"""Services module - document text extraction, validation and the medical pipeline."""

from .ocr import OCRService
from .text_extraction import (
    UploadedFile, TextExtractor, classify_file_type, generate_simulated_report
)
from .validation import validate_medical_data
from .medical_pipeline import MedicalDocumentPipeline, build_pipeline

__all__ = [
    'OCRService',
    'UploadedFile', 'TextExtractor', 'classify_file_type', 'generate_simulated_report',
    'validate_medical_data',
    'MedicalDocumentPipeline', 'build_pipeline',
]
