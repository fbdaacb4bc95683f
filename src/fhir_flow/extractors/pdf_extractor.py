# src/fhir_flow/extractors/pdf_extractor.py
"""
PDF text extraction from an in-memory payload.

Extraction cascade:
1. pypdfium2: fast, good Unicode support
2. pdfplumber: fallback for PDFs pdfium reads but returns no text for

A PDF neither library can open is a codec failure and raises
RecognitionError. A readable PDF with no text layer (a scan) returns an
empty string; the caller decides what to do with that.
"""

import io
import logging
from dataclasses import dataclass, field
from typing import List

import pdfplumber
import pypdfium2

from ..utils.exceptions import RecognitionError


@dataclass
class PDFTextResult:
    text: str = ""
    page_count: int = 0
    method: str = "unknown"
    warnings: List[str] = field(default_factory=list)


class PDFExtractor:

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def extract(self, payload: bytes) -> PDFTextResult:
        result = PDFTextResult()

        try:
            pages = self._extract_with_pypdfium2(payload)
            result.method = "pypdfium2"
        except Exception as e:
            self.logger.warning(f"pypdfium2 failed, trying pdfplumber: {e}")
            result.warnings.append(f"pypdfium2 failed: {e}")
            try:
                pages = self._extract_with_pdfplumber(payload)
                result.method = "pdfplumber"
            except Exception as e2:
                raise RecognitionError(
                    f"Unable to read PDF payload. pypdfium2: {e}, pdfplumber: {e2}"
                ) from e2

        if not any(page.strip() for page in pages) and result.method == "pypdfium2":
            # pdfium occasionally returns nothing for PDFs with odd text encodings
            try:
                plumber_pages = self._extract_with_pdfplumber(payload)
                if any(page.strip() for page in plumber_pages):
                    pages = plumber_pages
                    result.method = "pdfplumber"
            except Exception as e:
                result.warnings.append(f"pdfplumber retry failed: {e}")

        result.page_count = len(pages)
        result.text = "\n".join(page for page in pages if page)

        self.logger.info(
            f"PDF extraction: {len(result.text)} chars from "
            f"{result.page_count} pages via {result.method}"
        )
        return result

    def _extract_with_pypdfium2(self, payload: bytes) -> List[str]:
        pdf = pypdfium2.PdfDocument(payload)
        pages = []
        try:
            for page_num in range(len(pdf)):
                page = pdf[page_num]
                textpage = page.get_textpage()
                text = textpage.get_text_range() or ""
                pages.append(text.replace("\r\n", "\n").strip())
        finally:
            pdf.close()
        return pages

    def _extract_with_pdfplumber(self, payload: bytes) -> List[str]:
        with pdfplumber.open(io.BytesIO(payload)) as pdf:
            return [(page.extract_text() or "").strip() for page in pdf.pages]
