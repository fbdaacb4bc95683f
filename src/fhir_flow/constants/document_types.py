# ============================================================================
# src/fhir_flow/constants/document_types.py
# ============================================================================
"""
Document Types and Classification Keywords
- Coarse document types assigned at ingestion
- Keyword table, in priority order
"""

from enum import Enum
from typing import Tuple


class DocumentType(str, Enum):
    """
    Coarse document types assigned by the ingestion classifier.
    """
    LAB_REPORT = "lab_report"
    PRESCRIPTION = "prescription"
    DISCHARGE_SUMMARY = "discharge_summary"
    CLINICAL_NOTE = "clinical_note"


# First entry whose keywords appear in the text wins.
# Plain substring search, so "rx" also matches inside longer words.
DOC_TYPE_KEYWORDS: Tuple[Tuple[DocumentType, Tuple[str, ...]], ...] = (
    (DocumentType.LAB_REPORT, ("lab",)),
    (DocumentType.PRESCRIPTION, ("prescription", "rx")),
    (DocumentType.DISCHARGE_SUMMARY, ("discharge",)),
)

DEFAULT_DOC_TYPE = DocumentType.CLINICAL_NOTE
