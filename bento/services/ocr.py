"""
OCR service for extracting text from payment slip images.
"""

import io
import logging
import re
from typing import Optional

import pytesseract
from fastapi.concurrency import run_in_threadpool
from PIL import Image, ImageEnhance

from bento.config import settings

logger = logging.getLogger(__name__)


class OCRError(Exception):
    """Text recognition failed for one image."""


class OCRService:
    """Service for extracting text from slip images with Tesseract."""

    def __init__(self, lang: Optional[str] = None, tesseract_cmd: Optional[str] = None):
        """Initialize OCR service with Tesseract configuration."""
        self.lang = lang or settings.OCR_LANG
        pytesseract.pytesseract.tesseract_cmd = tesseract_cmd or settings.TESSERACT_CMD

    def extract_text_from_image(self, image_data: bytes) -> str:
        """
        Extract text from an image using Tesseract OCR.

        Args:
            image_data: Raw image bytes (JPEG, PNG)

        Returns:
            Extracted text

        Raises:
            OCRError: If the image cannot be decoded or Tesseract fails
        """
        try:
            image = Image.open(io.BytesIO(image_data))
            image = self._preprocess_image(image)

            # Slips are single-column blocks of text
            custom_config = r'--oem 3 --psm 6'
            text = pytesseract.image_to_string(image, lang=self.lang, config=custom_config)

            return self.normalize_text(text)

        except (OSError, pytesseract.TesseractError) as e:
            raise OCRError(f"Text recognition failed: {e}") from e

    async def recognize(self, image_data: bytes) -> str:
        """Awaitable recognition; Tesseract runs in the threadpool."""
        return await run_in_threadpool(self.extract_text_from_image, image_data)

    def _preprocess_image(self, image: Image.Image) -> Image.Image:
        """
        Preprocess image to improve OCR accuracy.

        Args:
            image: PIL Image object

        Returns:
            Preprocessed image
        """
        if image.mode != 'RGB':
            image = image.convert('RGB')

        image = image.convert('L')

        # Phone screenshots of slips have light pastel backgrounds
        enhancer = ImageEnhance.Contrast(image)
        return enhancer.enhance(2.0)

    def normalize_text(self, text: str) -> str:
        """
        Normalize extracted text while keeping line structure.

        Line breaks carry meaning for receiver and statement-row detection,
        so only horizontal whitespace is collapsed.

        Args:
            text: Raw OCR text

        Returns:
            Normalized text
        """
        text = re.sub(r'[ \t]+', ' ', text)
        lines = [line.strip() for line in text.split('\n')]
        return '\n'.join(line for line in lines if line)
