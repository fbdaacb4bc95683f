# src/fhir_flow/extractors/ocr_extractor.py
"""
OCR for image payloads using Tesseract.

Word-level results from pytesseract are regrouped into lines so downstream
line-oriented matchers see the same shape they get from text input.
"""

import io
import logging
import shutil
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

import pytesseract
from PIL import Image, ImageOps, UnidentifiedImageError

from ..config import recognition_settings
from ..utils.exceptions import RecognitionError


@dataclass
class OCRResult:
    text: str
    confidence: float
    method: str = "tesseract"


class OCRExtractor:

    def __init__(self, language: Optional[str] = None):
        self.logger = logging.getLogger(__name__)
        self.language = language or recognition_settings.OCR_LANGUAGE
        self._tesseract_available: Optional[bool] = None

    @property
    def tesseract_available(self) -> bool:
        """Check if the Tesseract binary is installed."""
        if self._tesseract_available is None:
            self._tesseract_available = shutil.which(pytesseract.pytesseract.tesseract_cmd) is not None
            if not self._tesseract_available:
                self.logger.warning("Tesseract OCR not found on PATH")
        return self._tesseract_available

    def load_image(self, payload: bytes) -> Image.Image:
        """Decode image bytes, applying EXIF orientation."""
        try:
            image = Image.open(io.BytesIO(payload))
            image.load()
        except (UnidentifiedImageError, OSError) as e:
            raise RecognitionError(f"Unable to decode image payload: {e}") from e

        image = ImageOps.exif_transpose(image)
        if image.mode not in ("RGB", "L"):
            image = image.convert("RGB")
        return image

    def extract_text(self, payload: bytes) -> OCRResult:
        """
        OCR an image payload.

        An unreadable image raises RecognitionError. A missing OCR engine
        yields an empty result so the caller can fall back.
        """
        image = self.load_image(payload)

        if not self.tesseract_available:
            return OCRResult(text="", confidence=0.0, method="unavailable")

        data = pytesseract.image_to_data(
            image, lang=self.language, output_type=pytesseract.Output.DICT
        )
        lines, confidence = self._group_lines(data)

        self.logger.info(f"Tesseract recognized {len(lines)} lines (avg conf {confidence:.2f})")
        return OCRResult(text="\n".join(lines), confidence=confidence)

    def _group_lines(self, data: Dict[str, List]) -> Tuple[List[str], float]:
        lines: Dict[Tuple[int, int, int], List[str]] = {}
        confidences = []

        for i, conf in enumerate(data["conf"]):
            text = str(data["text"][i]).strip()
            if not text or float(conf) < 0:
                continue
            key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
            lines.setdefault(key, []).append(text)
            confidences.append(float(conf) / 100.0)

        ordered = [" ".join(words) for _, words in sorted(lines.items())]
        avg_confidence = sum(confidences) / len(confidences) if confidences else 0.0
        return ordered, avg_confidence
