# ============================================================================
# src/fhir_flow/api/schemas.py
# ============================================================================
"""
Request bodies for the stage and gateway endpoints.

Field names are the camelCase keys the stages exchange. Every field is
optional: required-field checks belong to the stage components, which
answer with a 400 {"error": ...} naming the missing field.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict


class DocumentPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    documentId: Optional[str] = None
    sourceType: Optional[str] = None
    contentType: Optional[str] = None
    content: Optional[str] = None
    fileName: Optional[str] = None
    mimeType: Optional[str] = None
    fileContent: Optional[str] = None
    docType: Optional[str] = None
    pages: Optional[int] = None


class RecognizedPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    documentId: Optional[str] = None
    docType: Optional[str] = None
    textSegments: Optional[List[Dict[str, Any]]] = None


class ExtractedPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    documentId: Optional[str] = None
    extracted: Optional[Dict[str, Any]] = None
    trace: Optional[List[Dict[str, Any]]] = None


class ValidatedPayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    documentId: Optional[str] = None
    validated: Optional[Dict[str, Any]] = None
    warnings: Optional[List[str]] = None
    trace: Optional[List[Dict[str, Any]]] = None


class ProcessRequest(BaseModel):
    document: Optional[Dict[str, Any]] = None
