# ============================================================================
# src/fhir_flow/core/context/segments.py
# ============================================================================
"""
Recognized text and its provenance
- TextSegment: one recognized line
- TraceEntry: reference back to a segment, threaded through every later stage
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class TextSegment:
    id: str
    text: str
    confidence: float
    page: int = 1

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextSegment":
        return cls(
            id=str(data.get("id", "")),
            text=str(data.get("text") or ""),
            confidence=float(data.get("confidence") or 0.0),
            page=int(data.get("page") or 1),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "text": self.text,
            "confidence": self.confidence,
            "page": self.page,
        }


@dataclass(frozen=True)
class TraceEntry:
    segment_id: str
    confidence: float
    page: int

    @classmethod
    def from_segment(cls, segment: TextSegment) -> "TraceEntry":
        return cls(segment_id=segment.id, confidence=segment.confidence, page=segment.page)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TraceEntry":
        return cls(
            segment_id=str(data.get("segmentId", "")),
            confidence=float(data.get("confidence") or 0.0),
            page=int(data.get("page") or 1),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "segmentId": self.segment_id,
            "confidence": self.confidence,
            "page": self.page,
        }


def trace_from_list(items: Optional[List[Dict[str, Any]]]) -> List[TraceEntry]:
    return [TraceEntry.from_dict(item) for item in items or [] if isinstance(item, dict)]


def trace_to_list(trace: List[TraceEntry]) -> List[Dict[str, Any]]:
    return [entry.to_dict() for entry in trace]
