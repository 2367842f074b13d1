"""
Image Text Extraction Service using the multimodal model.
The model reads the report image directly, replacing a local OCR engine.
"""

import base64
import logging
from typing import Optional

from ..agents.base_agent import BaseAgent
from ..core.exceptions import LLMUnavailableError, OCRUnavailableError
from ..llm.base import LLMProvider

logger = logging.getLogger(__name__)

OCR_SYSTEM_PROMPT = (
    "You transcribe medical documents. Return the plain text of the document exactly as "
    "written, one line per row, without commentary."
)
OCR_PROMPT = "Transcribe all text in this medical document image."


class OCRService(BaseAgent):
    """
    Service for reading text out of document images.
    """

    def __init__(self, llm_provider: Optional[LLMProvider] = None, temperature: float = 0.0):
        """
        Args:
            llm_provider: Multimodal provider. Without one every call raises OCRUnavailableError.
            temperature: Sampling temperature for transcription
        """
        super().__init__("OCRService", OCR_SYSTEM_PROMPT, llm_provider)
        self.temperature = temperature

    async def extract_text(self, image_data: bytes, media_type: str) -> str:
        """
        Transcribe an image.

        Args:
            image_data: Raw image bytes
            media_type: MIME type, e.g. "image/png"

        Returns:
            Best-effort plain text

        Raises:
            OCRUnavailableError: If no provider is configured or nothing was read
        """
        if not image_data:
            raise OCRUnavailableError("Image is empty")

        images = [{"data": base64.b64encode(image_data).decode("utf-8"), "media_type": media_type}]
        try:
            text = await self.call_llm(OCR_PROMPT, temperature=self.temperature, images=images)
        except LLMUnavailableError as e:
            raise OCRUnavailableError(str(e)) from e

        if not text or not text.strip():
            raise OCRUnavailableError("No text recognized in image")

        logger.info("Image text extracted", extra={"extra_fields": {"characters": len(text)}})
        return text.strip()
