# src/fhir_flow/core/context/__init__.py

from .envelope import DocumentEnvelope
from .segments import TextSegment, TraceEntry, trace_from_list, trace_to_list
from .extracted_fields import (
    BloodPressure,
    LabTest,
    LegacyLab,
    ExtractedFields,
    ValidatedFields,
)
from .records import (
    PatientRecord,
    LogEntry,
    ImageUpload,
    UploadEntry,
    ResourceEntry,
    ActivityEvent,
    utc_now,
)

__all__ = [
    "DocumentEnvelope",
    "TextSegment",
    "TraceEntry",
    "trace_from_list",
    "trace_to_list",
    "BloodPressure",
    "LabTest",
    "LegacyLab",
    "ExtractedFields",
    "ValidatedFields",
    "PatientRecord",
    "LogEntry",
    "ImageUpload",
    "UploadEntry",
    "ResourceEntry",
    "ActivityEvent",
    "utc_now",
]
