# ============================================================================
# src/fhir_flow/constants/__init__.py
# ============================================================================
"""
Convenient imports for all constants
"""

from .document_types import DocumentType, DOC_TYPE_KEYWORDS, DEFAULT_DOC_TYPE
from .validation_ranges import (
    AGE_RANGE,
    SYSTOLIC_RANGE,
    DIASTOLIC_RANGE,
    AGE_OUT_OF_RANGE,
    BP_SYSTOLIC_OUT_OF_RANGE,
    BP_DIASTOLIC_OUT_OF_RANGE,
    LAB_VALUE_NEGATIVE,
    WARNING_CODES,
    LAB_VALUE_BOUNDS,
    MIN_LAB_NAME_LENGTH,
)
from .samples import PLACEHOLDER_TEXT, DEMO_PATIENTS, UNKNOWN_PATIENT
