"""
FHIR resource mapping for validated clinical fields.
"""

from .builder import ResourceMapper, MappingResult, normalize_gender, UNKNOWN_PATIENT
from .extensions import traceability_extension, age_extension, resource_to_dict
from .observation import (
    create_lab_observation,
    create_legacy_lab_observation,
    create_blood_pressure_observation,
)

__all__ = [
    "ResourceMapper",
    "MappingResult",
    "normalize_gender",
    "UNKNOWN_PATIENT",
    "traceability_extension",
    "age_extension",
    "resource_to_dict",
    "create_lab_observation",
    "create_legacy_lab_observation",
    "create_blood_pressure_observation",
]
