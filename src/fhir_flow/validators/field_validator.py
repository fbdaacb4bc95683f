# ============================================================================
# FILE: src/fhir_flow/validators/field_validator.py
# ============================================================================
"""
Field Validator

Fixed range checks over extracted fields:
1. Age within [0, 120]
2. Systolic within [60, 250]
3. Diastolic within [30, 150]
4. Legacy lab value not negative

A violated rule adds a warning code; it never raises and never changes the
data. A rule whose value is missing is skipped. Every rule runs regardless
of the others.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from ..constants import (
    AGE_RANGE,
    SYSTOLIC_RANGE,
    DIASTOLIC_RANGE,
    AGE_OUT_OF_RANGE,
    BP_SYSTOLIC_OUT_OF_RANGE,
    BP_DIASTOLIC_OUT_OF_RANGE,
    LAB_VALUE_NEGATIVE,
)
from ..core.context import ExtractedFields, TraceEntry, ValidatedFields, trace_to_list
from ..utils.exceptions import InvalidInput

logger = logging.getLogger(__name__)

Rule = Callable[[ExtractedFields], Optional[str]]


def _outside(value: float, bounds: Tuple[float, float]) -> bool:
    low, high = bounds
    return value < low or value > high


def check_age(fields: ExtractedFields) -> Optional[str]:
    if fields.age is not None and _outside(fields.age, AGE_RANGE):
        return AGE_OUT_OF_RANGE
    return None


def check_systolic(fields: ExtractedFields) -> Optional[str]:
    bp = fields.blood_pressure
    if bp is not None and bp.systolic is not None and _outside(bp.systolic, SYSTOLIC_RANGE):
        return BP_SYSTOLIC_OUT_OF_RANGE
    return None


def check_diastolic(fields: ExtractedFields) -> Optional[str]:
    bp = fields.blood_pressure
    if bp is not None and bp.diastolic is not None and _outside(bp.diastolic, DIASTOLIC_RANGE):
        return BP_DIASTOLIC_OUT_OF_RANGE
    return None


def check_legacy_lab(fields: ExtractedFields) -> Optional[str]:
    lab = fields.lab
    if lab is not None and lab.value is not None and lab.value < 0:
        return LAB_VALUE_NEGATIVE
    return None


RULES: Tuple[Rule, ...] = (
    check_age,
    check_systolic,
    check_diastolic,
    check_legacy_lab,
)


@dataclass
class ValidationResult:
    document_id: Optional[str]
    validated: ValidatedFields
    trace: List[TraceEntry] = field(default_factory=list)

    def to_dict(self):
        return {
            "documentId": self.document_id,
            "validated": self.validated.fields.to_dict(),
            "warnings": list(self.validated.warnings),
            "trace": trace_to_list(self.trace),
        }


class FieldValidator:
    """
    Rule-based validation for extracted fields.

    Produces warnings, not errors: out-of-range values still flow on to
    mapping and storage.
    """

    def __init__(self, rules: Tuple[Rule, ...] = RULES):
        self.rules = rules

    def validate(self, fields: Optional[ExtractedFields]) -> ValidatedFields:
        """
        Raises:
            InvalidInput: no extracted fields were supplied
        """
        if fields is None:
            raise InvalidInput("extracted is required")

        warnings = [code for code in (rule(fields) for rule in self.rules) if code]

        if warnings:
            logger.info(f"Validation produced warnings: {warnings}")

        return ValidatedFields(fields=fields, warnings=warnings)

    def validate_document(
        self,
        document_id: Optional[str],
        fields: Optional[ExtractedFields],
        trace: Optional[List[TraceEntry]] = None,
    ) -> ValidationResult:
        return ValidationResult(
            document_id=document_id,
            validated=self.validate(fields),
            trace=list(trace or []),
        )
