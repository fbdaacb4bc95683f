# ============================================================================
# src/fhir_flow/core/context/records.py
# ============================================================================
"""
Consolidation store records
- PatientRecord: merged per-patient state, mutated only by the store
- LogEntry / ImageUpload: per-record history items
- UploadEntry / ResourceEntry / ActivityEvent: global log items
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from ..bounded_list import BoundedList


def utc_now() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    document_id: Optional[str]
    warnings: List[str]
    resource_count: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "timestamp": self.timestamp,
            "documentId": self.document_id,
            "warnings": list(self.warnings),
            "resourceCount": self.resource_count,
        }


@dataclass(frozen=True)
class ImageUpload:
    document_id: Optional[str]
    file_name: str
    mime_type: str
    data_url: Optional[str]
    uploaded_at: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documentId": self.document_id,
            "fileName": self.file_name,
            "mimeType": self.mime_type,
            "dataUrl": self.data_url,
            "uploadedAt": self.uploaded_at,
        }


@dataclass
class PatientRecord:
    id: str
    display_name: str
    last_updated: str
    logs: BoundedList[LogEntry]
    uploads: BoundedList[ImageUpload]
    # Replaced wholesale on every merge, never patched
    resources: List[Dict[str, Any]] = field(default_factory=list)

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "lastUpdated": self.last_updated,
            "logCount": len(self.logs),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "displayName": self.display_name,
            "lastUpdated": self.last_updated,
            "resources": list(self.resources),
            "logs": [entry.to_dict() for entry in self.logs],
            "uploads": [upload.to_dict() for upload in self.uploads],
        }


@dataclass(frozen=True)
class UploadEntry:
    document_id: str
    source_type: str
    content_type: str
    file_name: Optional[str]
    mime_type: Optional[str]
    received_at: str
    status: str = "processed"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documentId": self.document_id,
            "sourceType": self.source_type,
            "contentType": self.content_type,
            "fileName": self.file_name,
            "mimeType": self.mime_type,
            "receivedAt": self.received_at,
            "status": self.status,
        }


@dataclass(frozen=True)
class ResourceEntry:
    document_id: Optional[str]
    resource_type: Optional[str]
    resource_id: Optional[str]
    patient_name: Optional[str]
    recorded_at: str
    resource: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documentId": self.document_id,
            "resourceType": self.resource_type,
            "resourceId": self.resource_id,
            "patientName": self.patient_name,
            "recordedAt": self.recorded_at,
            "resource": self.resource,
        }


@dataclass(frozen=True)
class ActivityEvent:
    type: str
    message: str
    timestamp: str

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "message": self.message, "timestamp": self.timestamp}
