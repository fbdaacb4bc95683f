# ============================================================================
# FILE: src/fhir_flow/validators/__init__.py
# ============================================================================
"""
Validation of extracted clinical fields.
"""

from .field_validator import (
    FieldValidator,
    ValidationResult,
    RULES,
    check_age,
    check_systolic,
    check_diastolic,
    check_legacy_lab,
)

__all__ = [
    'FieldValidator',
    'ValidationResult',
    'RULES',
    'check_age',
    'check_systolic',
    'check_diastolic',
    'check_legacy_lab',
]
