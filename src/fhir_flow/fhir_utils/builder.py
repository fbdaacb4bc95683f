# ============================================================================
# FILE: src/fhir_flow/fhir_utils/builder.py
# ============================================================================
"""
Resource Mapper

Converts validated fields into FHIR resources.

Always emits:
- exactly one Patient (name defaults to "Unknown Patient", gender to "unknown")

Emits when present:
- one Observation per structured lab test, OR one Observation from the
  legacy single-value lab field when no structured tests exist (never both)
- one blood pressure Observation with systolic/diastolic components

Every resource carries its own traceability extension. Missing optional
fields lower fidelity but never suppress a resource.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional
from uuid import uuid4

from fhir.resources.humanname import HumanName
from fhir.resources.patient import Patient

from ..config import fhir_settings
from ..constants import UNKNOWN_PATIENT
from ..core.context import ExtractedFields, TraceEntry, ValidatedFields
from ..utils.exceptions import InvalidInput
from .extensions import age_extension, resource_to_dict, traceability_extension
from .observation import (
    create_blood_pressure_observation,
    create_lab_observation,
    create_legacy_lab_observation,
)

logger = logging.getLogger(__name__)

GENDER_MAP = {
    "male": "male", "m": "male",
    "female": "female", "f": "female",
    "other": "other",
    "unknown": "unknown",
}


@dataclass
class MappingResult:
    document_id: Optional[str]
    fhir_version: str
    warnings: List[str] = field(default_factory=list)
    resources: List[Dict[str, Any]] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "documentId": self.document_id,
            "fhirVersion": self.fhir_version,
            "warnings": list(self.warnings),
            "resources": list(self.resources),
        }


def normalize_gender(gender: Optional[str]) -> str:
    return GENDER_MAP.get((gender or "").strip().lower(), "unknown")


class ResourceMapper:
    """
    FHIR resource builder for validated fields.
    """

    def __init__(self):
        self.logger = logging.getLogger(__name__)

    def create_patient(self, fields: ExtractedFields, trace: List[TraceEntry]) -> Patient:
        extracted_name = (fields.patient_name or "").strip()
        name = extracted_name or UNKNOWN_PATIENT

        human_name = {"text": name}
        if extracted_name:
            parts = extracted_name.split()
            if len(parts) > 1:
                human_name["family"] = parts[-1]
                human_name["given"] = parts[:-1]

        extensions = [traceability_extension(trace)]
        if fields.age is not None:
            extensions.append(age_extension(fields.age))

        return Patient(
            id=f"patient-{uuid4()}",
            name=[HumanName(**human_name)],
            gender=normalize_gender(fields.gender),
            extension=extensions,
        )

    def create_observations(self, fields: ExtractedFields, trace: List[TraceEntry]) -> list:
        observations = []

        if fields.lab_tests:
            for test_key, test in fields.lab_tests.items():
                observations.append(create_lab_observation(test_key, test, trace))
        elif fields.lab is not None:
            observations.append(create_legacy_lab_observation(fields.lab, trace))

        if fields.blood_pressure is not None:
            observations.append(create_blood_pressure_observation(fields.blood_pressure, trace))

        return observations

    def map_fields(self, fields: ExtractedFields, trace: List[TraceEntry]) -> List[Dict[str, Any]]:
        """Patient first, then observations, as JSON-safe dicts."""
        resources = [self.create_patient(fields, trace)]
        resources.extend(self.create_observations(fields, trace))
        return [resource_to_dict(resource) for resource in resources]

    def map_document(
        self,
        document_id: Optional[str],
        validated: Optional[ValidatedFields],
        trace: Optional[List[TraceEntry]] = None,
    ) -> MappingResult:
        """
        Raises:
            InvalidInput: no validated fields were supplied
        """
        if validated is None:
            raise InvalidInput("validated is required")

        resources = self.map_fields(validated.fields, list(trace or []))

        self.logger.info(
            f"Mapped {document_id} to {len(resources)} resources "
            f"({len(validated.warnings)} warnings)"
        )

        return MappingResult(
            document_id=document_id,
            fhir_version=fhir_settings.FHIR_VERSION,
            warnings=list(validated.warnings),
            resources=resources,
        )
