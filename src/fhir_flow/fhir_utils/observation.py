# ============================================================================
# src/fhir_flow/fhir_utils/observation.py
# ============================================================================
"""
FHIR Observation builders for lab results and blood pressure.
"""

from typing import List, Optional
from uuid import uuid4

from fhir.resources.codeableconcept import CodeableConcept
from fhir.resources.observation import Observation, ObservationComponent
from fhir.resources.quantity import Quantity

from ..core.context import BloodPressure, LabTest, LegacyLab, TraceEntry
from .extensions import traceability_extension

UNKNOWN_UNIT = "unknown"
UNKNOWN_TEST = "unknown"


def _observation_id(prefix: str = "obs") -> str:
    return f"{prefix}-{uuid4()}"


def _quantity(value: Optional[float], unit: Optional[str]) -> Quantity:
    return Quantity(value=value, unit=unit or UNKNOWN_UNIT)


def create_lab_observation(test_key: str, test: LabTest, trace: List[TraceEntry]) -> Observation:
    """
    Create an Observation for one structured lab test.

    Args:
        test_key: Normalized test key (e.g. "mean_cell_volume")
        test: Value, unit and the raw line it came from
        trace: Source segments for the whole document
    """
    return Observation(
        id=_observation_id(),
        status="final",
        code=CodeableConcept(text=test_key.replace("_", " ").strip() or UNKNOWN_TEST),
        valueQuantity=_quantity(test.value, test.unit),
        extension=[traceability_extension(trace, raw=test.raw)],
    )


def create_legacy_lab_observation(lab: LegacyLab, trace: List[TraceEntry]) -> Observation:
    """Create an Observation from the single-value legacy lab field."""
    return Observation(
        id=_observation_id(),
        status="final",
        code=CodeableConcept(text=lab.test_name or UNKNOWN_TEST),
        valueQuantity=_quantity(lab.value, lab.unit),
        extension=[traceability_extension(trace)],
    )


def create_blood_pressure_observation(bp: BloodPressure, trace: List[TraceEntry]) -> Observation:
    """Create a panel Observation with a component per reading present."""
    components = [
        ObservationComponent(
            code=CodeableConcept(text=label),
            valueQuantity=_quantity(reading, bp.unit),
        )
        for label, reading in (("Systolic", bp.systolic), ("Diastolic", bp.diastolic))
        if reading is not None
    ]
    return Observation(
        id=_observation_id("obs-bp"),
        status="final",
        code=CodeableConcept(text="Blood Pressure"),
        component=components or None,
        extension=[traceability_extension(trace)],
    )
