# ============================================================================
# src/fhir_flow/core/context/extracted_fields.py
# ============================================================================
"""
Candidate clinical facts pulled out of recognized text.

Every field is optional: a matcher that finds nothing leaves its field None.
`lab` mirrors the first structured lab test for consumers that still read
the single-value shape.

The from_dict readers accept partial records from other services. A
sub-field that is missing or not a number reads as None; a blood pressure
with neither reading, or a lab entry that is not an object, is dropped.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


def _number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    return number if math.isfinite(number) else None


def _integer(value: Any) -> Optional[int]:
    number = _number(value)
    return int(number) if number is not None else None


def _text(value: Any) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip() or None


@dataclass(frozen=True)
class BloodPressure:
    systolic: Optional[int]
    diastolic: Optional[int]
    unit: str = "mmHg"

    @classmethod
    def from_dict(cls, data: Any) -> Optional["BloodPressure"]:
        if not isinstance(data, dict):
            return None
        systolic = _integer(data.get("systolic"))
        diastolic = _integer(data.get("diastolic"))
        if systolic is None and diastolic is None:
            return None
        return cls(systolic=systolic, diastolic=diastolic, unit=_text(data.get("unit")) or "mmHg")

    def to_dict(self) -> Dict[str, Any]:
        return {"systolic": self.systolic, "diastolic": self.diastolic, "unit": self.unit}


@dataclass(frozen=True)
class LabTest:
    value: Optional[float]
    unit: Optional[str] = None
    raw: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["LabTest"]:
        if not isinstance(data, dict):
            return None
        return cls(value=_number(data.get("value")), unit=_text(data.get("unit")), raw=data.get("raw"))

    def to_dict(self) -> Dict[str, Any]:
        return {"value": self.value, "unit": self.unit, "raw": self.raw}


@dataclass(frozen=True)
class LegacyLab:
    test_name: Optional[str]
    value: Optional[float]
    unit: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> Optional["LegacyLab"]:
        if not isinstance(data, dict):
            return None
        return cls(
            test_name=_text(data.get("testName")),
            value=_number(data.get("value")),
            unit=_text(data.get("unit")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"testName": self.test_name, "value": self.value, "unit": self.unit}


@dataclass(frozen=True)
class ExtractedFields:
    patient_name: Optional[str] = None
    age: Optional[int] = None
    gender: Optional[str] = None
    blood_pressure: Optional[BloodPressure] = None
    # Insertion-ordered: test key -> LabTest
    lab_tests: Dict[str, LabTest] = field(default_factory=dict)
    lab: Optional[LegacyLab] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ExtractedFields":
        labs = data.get("labTests")
        lab_tests = {}
        if isinstance(labs, dict):
            for name, entry in labs.items():
                test = LabTest.from_dict(entry)
                if test is not None:
                    lab_tests[str(name)] = test

        return cls(
            patient_name=_text(data.get("patientName")),
            age=_integer(data.get("age")),
            gender=_text(data.get("gender")),
            blood_pressure=BloodPressure.from_dict(data.get("bloodPressure")),
            lab_tests=lab_tests,
            lab=LegacyLab.from_dict(data.get("lab")),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "patientName": self.patient_name,
            "age": self.age,
            "gender": self.gender,
            "bloodPressure": self.blood_pressure.to_dict() if self.blood_pressure else None,
            "labTests": (
                {name: test.to_dict() for name, test in self.lab_tests.items()}
                if self.lab_tests else None
            ),
            "lab": self.lab.to_dict() if self.lab else None,
        }


@dataclass(frozen=True)
class ValidatedFields:
    """Extracted fields unchanged, plus warning codes in rule order."""
    fields: ExtractedFields
    warnings: List[str] = field(default_factory=list)
