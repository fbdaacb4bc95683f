# ============================================================================
# src/fhir_flow/core/context/envelope.py
# ============================================================================
"""
Document envelope
- One submitted clinical document as it moves through the pipeline
- Wire form uses the camelCase keys the stages exchange
"""

from dataclasses import dataclass, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DocumentEnvelope:
    document_id: Optional[str] = None
    source_type: Optional[str] = None
    content_type: Optional[str] = None
    content: Optional[str] = None
    file_name: Optional[str] = None
    mime_type: Optional[str] = None
    # Base64 payload, optionally as a data URL
    file_content: Optional[str] = None

    # Set by the ingestion classifier
    doc_type: Optional[str] = None
    pages: int = 1

    @property
    def has_text(self) -> bool:
        return bool(self.content)

    @property
    def has_binary(self) -> bool:
        return bool(self.file_content)

    @property
    def has_payload(self) -> bool:
        return self.has_text or self.has_binary

    @property
    def is_pdf(self) -> bool:
        return bool(self.mime_type) and "pdf" in self.mime_type

    @property
    def is_image(self) -> bool:
        return bool(self.mime_type) and self.mime_type.startswith("image/")

    def with_updates(self, **changes) -> "DocumentEnvelope":
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DocumentEnvelope":
        data = data or {}
        return cls(
            document_id=data.get("documentId"),
            source_type=data.get("sourceType"),
            content_type=data.get("contentType"),
            content=data.get("content"),
            file_name=data.get("fileName"),
            mime_type=data.get("mimeType"),
            file_content=data.get("fileContent"),
            doc_type=data.get("docType"),
            pages=data.get("pages") or 1,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documentId": self.document_id,
            "sourceType": self.source_type,
            "contentType": self.content_type,
            "docType": self.doc_type,
            "pages": self.pages,
            "content": self.content or "",
            "fileName": self.file_name,
            "mimeType": self.mime_type,
            "fileContent": self.file_content,
        }
