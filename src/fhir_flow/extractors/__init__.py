# src/fhir_flow/extractors/__init__.py
"""
Text recognition and field extraction

Provides:
- PDF text extraction (pypdfium2, pdfplumber)
- Image OCR (Tesseract)
- Text recognizer routing envelopes to the right backend
- Heuristic clinical field extraction
"""

from .pdf_extractor import PDFExtractor, PDFTextResult
from .ocr_extractor import OCRExtractor, OCRResult
from .text_recognizer import (
    TextRecognizer,
    RecognitionResult,
    decode_payload,
    iter_segments,
    MODE_TEXT,
    MODE_PDF,
    MODE_OCR,
    MODE_PLACEHOLDER,
)
from .field_extractor import (
    FieldExtractor,
    ExtractionResult,
    extract_fields,
    first_match,
    NAME_MATCHERS,
    GENDER_MATCHERS,
)

__all__ = [
    "PDFExtractor",
    "PDFTextResult",
    "OCRExtractor",
    "OCRResult",
    "TextRecognizer",
    "RecognitionResult",
    "decode_payload",
    "iter_segments",
    "MODE_TEXT",
    "MODE_PDF",
    "MODE_OCR",
    "MODE_PLACEHOLDER",
    "FieldExtractor",
    "ExtractionResult",
    "extract_fields",
    "first_match",
    "NAME_MATCHERS",
    "GENDER_MATCHERS",
]
