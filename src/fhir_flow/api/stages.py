# ============================================================================
# src/fhir_flow/api/stages.py
# ============================================================================
"""
Stage services

One small FastAPI app per pipeline stage. Each exposes GET /health and a
single POST endpoint that takes the previous stage's output and returns its
own:

    ingestion   POST /ingest    envelope            -> classified envelope
    ocr         POST /ocr       classified envelope -> text segments
    nlp         POST /nlp       text segments       -> extracted fields + trace
    validation  POST /validate  extracted fields    -> fields + warnings
    mapping     POST /map       validated fields    -> FHIR resource bundle

Handlers are plain functions (run in the threadpool): PDF parsing and OCR
block.
"""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import FastAPI

from ..classifiers import IngestionClassifier
from ..core.context import (
    DocumentEnvelope,
    ExtractedFields,
    TextSegment,
    ValidatedFields,
    trace_from_list,
)
from ..extractors import FieldExtractor, TextRecognizer
from ..fhir_utils import ResourceMapper
from ..validators import FieldValidator
from .errors import configure_app
from .schemas import DocumentPayload, ExtractedPayload, RecognizedPayload, ValidatedPayload

logger = logging.getLogger(__name__)

SERVICE_NAMES = {
    "ingestion": "ingestion-service",
    "ocr": "ocr-service",
    "nlp": "nlp-service",
    "validation": "validation-service",
    "mapping": "mapping-service",
}


def _stage_app(stage: str, title: str) -> FastAPI:
    app = FastAPI(title=title, version="1.0.0")
    configure_app(app)

    @app.get("/health")
    def health():
        return {"status": "ok", "service": SERVICE_NAMES[stage]}

    return app


def create_ingestion_app(classifier: Optional[IngestionClassifier] = None) -> FastAPI:
    classifier = classifier or IngestionClassifier()
    app = _stage_app("ingestion", "Ingestion Service")

    @app.post("/ingest")
    def ingest(payload: DocumentPayload) -> Dict[str, Any]:
        envelope = DocumentEnvelope.from_dict(payload.model_dump())
        return classifier.classify(envelope).to_dict()

    return app


def create_ocr_app(recognizer: Optional[TextRecognizer] = None) -> FastAPI:
    recognizer = recognizer or TextRecognizer()
    app = _stage_app("ocr", "Text Recognition Service")

    @app.post("/ocr")
    def ocr(payload: DocumentPayload) -> Dict[str, Any]:
        envelope = DocumentEnvelope.from_dict(payload.model_dump())
        return recognizer.recognize(envelope).to_dict()

    return app


def create_nlp_app(extractor: Optional[FieldExtractor] = None) -> FastAPI:
    extractor = extractor or FieldExtractor()
    app = _stage_app("nlp", "Field Extraction Service")

    @app.post("/nlp")
    def nlp(payload: RecognizedPayload) -> Dict[str, Any]:
        segments = None
        if payload.textSegments is not None:
            segments = [TextSegment.from_dict(item) for item in payload.textSegments]
        return extractor.extract(payload.documentId, segments).to_dict()

    return app


def create_validation_app(validator: Optional[FieldValidator] = None) -> FastAPI:
    validator = validator or FieldValidator()
    app = _stage_app("validation", "Validation Service")

    @app.post("/validate")
    def validate(payload: ExtractedPayload) -> Dict[str, Any]:
        fields = None
        if payload.extracted is not None:
            fields = ExtractedFields.from_dict(payload.extracted)
        result = validator.validate_document(payload.documentId, fields, trace_from_list(payload.trace))
        return result.to_dict()

    return app


def create_mapping_app(mapper: Optional[ResourceMapper] = None) -> FastAPI:
    mapper = mapper or ResourceMapper()
    app = _stage_app("mapping", "Mapping Service")

    @app.post("/map")
    def map_resources(payload: ValidatedPayload) -> Dict[str, Any]:
        validated = None
        if payload.validated is not None:
            validated = ValidatedFields(
                fields=ExtractedFields.from_dict(payload.validated),
                warnings=list(payload.warnings or []),
            )
        result = mapper.map_document(payload.documentId, validated, trace_from_list(payload.trace))
        return result.to_dict()

    return app


STAGE_APP_FACTORIES: Dict[str, Callable[[], FastAPI]] = {
    "ingestion": create_ingestion_app,
    "ocr": create_ocr_app,
    "nlp": create_nlp_app,
    "validation": create_validation_app,
    "mapping": create_mapping_app,
}


def create_stage_app(stage: str) -> FastAPI:
    try:
        factory = STAGE_APP_FACTORIES[stage]
    except KeyError:
        raise ValueError(f"Unknown stage '{stage}', expected one of {sorted(STAGE_APP_FACTORIES)}")
    return factory()
