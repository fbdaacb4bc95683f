# ============================================================================
# src/fhir_flow/classifiers/document_classifier.py
# ============================================================================
"""
Ingestion Classifier

First stage of the pipeline. Two jobs:

1. NORMALIZE the envelope
   - document id defaults to doc-<epoch millis>
   - source/content type tags default to "unknown"
   - page count fixed to 1 (pages are not split at ingestion)

2. CLASSIFY into a coarse document type
   - case-insensitive keyword search over content-type hint + raw text
   - keyword table is walked in priority order, first hit wins
   - no hit -> clinical_note

Binary payloads are not inspected here; their text does not exist until the
recognition stage runs, so an image upload is classified on its hint alone.
"""

import logging
import time
from typing import Optional

from ..constants import DocumentType, DOC_TYPE_KEYWORDS, DEFAULT_DOC_TYPE
from ..core.context import DocumentEnvelope
from ..utils.exceptions import InvalidInput

logger = logging.getLogger(__name__)


def detect_doc_type(content_type: Optional[str], content: Optional[str]) -> DocumentType:
    """Pick a document type from keywords in the type hint and raw text."""
    haystack = f"{content_type or ''} {content or ''}".lower()

    for doc_type, keywords in DOC_TYPE_KEYWORDS:
        if any(keyword in haystack for keyword in keywords):
            return doc_type

    return DEFAULT_DOC_TYPE


def generate_document_id() -> str:
    return f"doc-{int(time.time() * 1000)}"


class IngestionClassifier:
    """
    Normalizes and tags incoming document envelopes.

    Stateless; one instance can serve any number of concurrent requests.
    """

    def classify(self, envelope: DocumentEnvelope) -> DocumentEnvelope:
        """
        Normalize the envelope and attach its document type.

        Raises:
            InvalidInput: neither raw text nor a binary payload is present
        """
        if envelope is None or not envelope.has_payload:
            raise InvalidInput("content or fileContent is required")

        doc_type = detect_doc_type(envelope.content_type, envelope.content)

        classified = envelope.with_updates(
            document_id=envelope.document_id or generate_document_id(),
            source_type=envelope.source_type or "unknown",
            content_type=envelope.content_type or "unknown",
            content=envelope.content or "",
            doc_type=doc_type.value,
            pages=1,
        )

        logger.info(
            f"Classified {classified.document_id} as {doc_type.value} "
            f"(binary={classified.has_binary}, mime={classified.mime_type})"
        )
        return classified
