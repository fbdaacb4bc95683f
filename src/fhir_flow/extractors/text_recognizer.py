# ============================================================================
# src/fhir_flow/extractors/text_recognizer.py
# ============================================================================
"""
Text Recognizer

Turns an ingested envelope into confidence-scored text lines.

Routing:
    raw text only            -> pass through           (mode "text")
    binary + PDF mime        -> PDF text extraction    (mode "pdf")
    binary + image/* mime    -> Tesseract OCR          (mode "ocr")
    binary + other mime      -> raw text, if any       (mode "text")
    nothing readable at all  -> fixed placeholder      (mode "placeholder")

The placeholder keeps the pipeline moving on unreadable input; downstream
consumers must check the mode tag to tell it apart from real content.
Confidence is informational only and never gates later stages.
"""

import base64
import binascii
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from ..config import recognition_settings
from ..constants import PLACEHOLDER_TEXT
from ..core.context import DocumentEnvelope, TextSegment
from ..utils.exceptions import InvalidInput, RecognitionError
from .ocr_extractor import OCRExtractor
from .pdf_extractor import PDFExtractor

MODE_TEXT = "text"
MODE_PDF = "pdf"
MODE_OCR = "ocr"
MODE_PLACEHOLDER = "placeholder"


@dataclass
class RecognitionResult:
    document_id: Optional[str]
    doc_type: Optional[str]
    mode: str
    segments: List[TextSegment] = field(default_factory=list)
    file_name: Optional[str] = None
    mime_type: Optional[str] = None

    def to_dict(self):
        return {
            "documentId": self.document_id,
            "docType": self.doc_type,
            "textSegments": [segment.to_dict() for segment in self.segments],
            "ocrMode": self.mode,
            "fileName": self.file_name,
            "mimeType": self.mime_type,
        }


def decode_payload(file_content: str) -> bytes:
    """
    Decode a base64 payload, accepting a data URL prefix.

    Raises:
        RecognitionError: payload is not valid base64
    """
    encoded = str(file_content).split(",")[-1].strip()
    try:
        return base64.b64decode(encoded, validate=True)
    except (binascii.Error, ValueError) as e:
        raise RecognitionError(f"Unable to decode fileContent: {e}") from e


def iter_segments(text: str, document_id: Optional[str], confidence: float) -> Iterator[TextSegment]:
    """Yield one segment per non-blank line, numbered from 1."""
    prefix = document_id or "doc"
    index = 0
    for line in text.splitlines():
        line = line.strip()
        if not line:
            continue
        index += 1
        yield TextSegment(
            id=f"{prefix}-seg-{index}",
            text=line,
            confidence=confidence,
            page=1,
        )


class TextRecognizer:

    def __init__(
        self,
        pdf_extractor: Optional[PDFExtractor] = None,
        ocr_extractor: Optional[OCRExtractor] = None,
    ):
        self.logger = logging.getLogger(__name__)
        self.pdf_extractor = pdf_extractor or PDFExtractor()
        self.ocr_extractor = ocr_extractor or OCRExtractor()

    def recognize(self, envelope: DocumentEnvelope) -> RecognitionResult:
        """
        Recognize text lines for an envelope.

        Raises:
            InvalidInput: neither raw text nor a binary payload is present
            RecognitionError: the binary payload could not be decoded
        """
        if envelope is None or not envelope.has_payload:
            raise InvalidInput("content or fileContent is required")

        text = envelope.content or ""
        mode = MODE_TEXT

        if envelope.has_binary:
            payload = decode_payload(envelope.file_content)

            if envelope.is_pdf:
                text = self.pdf_extractor.extract(payload).text
                mode = MODE_PDF
            elif envelope.is_image:
                text = self.ocr_extractor.extract_text(payload).text
                mode = MODE_OCR

        if not text.strip():
            self.logger.warning(
                f"No text recognized for {envelope.document_id} (mode={mode}); using placeholder sample"
            )
            text = PLACEHOLDER_TEXT
            mode = MODE_PLACEHOLDER

        confidence = (
            recognition_settings.BINARY_CONFIDENCE
            if envelope.has_binary
            else recognition_settings.TEXT_CONFIDENCE
        )

        segments = list(iter_segments(text, envelope.document_id, confidence))
        self.logger.info(f"Recognized {len(segments)} segments for {envelope.document_id} (mode={mode})")

        return RecognitionResult(
            document_id=envelope.document_id,
            doc_type=envelope.doc_type,
            mode=mode,
            segments=segments,
            file_name=envelope.file_name,
            mime_type=envelope.mime_type,
        )
