# ============================================================================
# FILE: tests/unit/test_resource_mapper.py
# ============================================================================
"""
Unit tests for FHIR resource mapping
"""

import json

import pytest

from fhir_flow.core.context import (
    BloodPressure,
    ExtractedFields,
    LabTest,
    LegacyLab,
    TraceEntry,
    ValidatedFields,
)
from fhir_flow.fhir_utils import ResourceMapper, normalize_gender
from fhir_flow.utils.exceptions import InvalidInput


@pytest.fixture
def trace():
    return [
        TraceEntry(segment_id="doc-1-seg-1", confidence=0.93, page=1),
        TraceEntry(segment_id="doc-1-seg-2", confidence=0.93, page=1),
    ]


@pytest.fixture
def mapper():
    return ResourceMapper()


def _extension(resource, url):
    return next(ext for ext in resource.get("extension", []) if ext["url"] == url)


def _trace_payload(resource):
    return json.loads(_extension(resource, "traceability")["valueString"])


def _by_type(resources, resource_type):
    return [r for r in resources if r["resourceType"] == resource_type]


def test_full_sample_mapping(mapper, trace):
    fields = ExtractedFields(
        patient_name="Jane Doe",
        age=45,
        gender="female",
        blood_pressure=BloodPressure(systolic=120, diastolic=80),
        lab_tests={"hemoglobin": LabTest(value=13.1, unit="g/dL", raw="Lab: Hemoglobin 13.1 g/dL")},
        lab=LegacyLab(test_name="hemoglobin", value=13.1, unit="g/dL"),
    )

    result = mapper.map_document("doc-1", ValidatedFields(fields=fields, warnings=[]), trace)
    resources = result.to_dict()["resources"]

    assert [r["resourceType"] for r in resources] == ["Patient", "Observation", "Observation"]

    patient = resources[0]
    assert patient["name"][0]["text"] == "Jane Doe"
    assert patient["gender"] == "female"
    assert _extension(patient, "extracted-age")["valueInteger"] == 45
    assert patient["id"].startswith("patient-")

    lab, bp = resources[1], resources[2]
    assert lab["code"]["text"] == "hemoglobin"
    assert lab["valueQuantity"]["value"] == 13.1
    assert lab["valueQuantity"]["unit"] == "g/dL"
    assert lab["status"] == "final"

    assert bp["code"]["text"] == "Blood Pressure"
    assert [c["code"]["text"] for c in bp["component"]] == ["Systolic", "Diastolic"]
    assert [c["valueQuantity"]["value"] for c in bp["component"]] == [120, 80]
    assert bp["component"][0]["valueQuantity"]["unit"] == "mmHg"


def test_structured_labs_suppress_legacy_lab(mapper, trace):
    fields = ExtractedFields(
        lab_tests={
            "hemoglobin": LabTest(value=15.0, unit="g/dl", raw="HEMOGLOBIN 15 g/dl"),
            "neutrophils": LabTest(value=79.0, unit="%", raw="NEUTROPHILS 79 %"),
        },
        lab=LegacyLab(test_name="hemoglobin", value=15.0, unit="g/dl"),
    )

    resources = mapper.map_fields(fields, trace)
    observations = _by_type(resources, "Observation")

    assert [o["code"]["text"] for o in observations] == ["hemoglobin", "neutrophils"]
    assert _trace_payload(observations[0])["raw"] == "HEMOGLOBIN 15 g/dl"


def test_legacy_lab_used_without_structured_labs(mapper, trace):
    fields = ExtractedFields(lab=LegacyLab(test_name="glucose", value=98.0, unit=None))

    observations = _by_type(mapper.map_fields(fields, trace), "Observation")

    assert len(observations) == 1
    assert observations[0]["code"]["text"] == "glucose"
    assert observations[0]["valueQuantity"]["unit"] == "unknown"
    assert "raw" not in _trace_payload(observations[0])


def test_lab_key_underscores_become_spaces(mapper, trace):
    fields = ExtractedFields(lab_tests={"mean_cell_volume": LabTest(value=88.0, unit="fL", raw="x")})

    observation = _by_type(mapper.map_fields(fields, trace), "Observation")[0]

    assert observation["code"]["text"] == "mean cell volume"


def test_empty_fields_still_emit_patient(mapper, trace):
    resources = mapper.map_fields(ExtractedFields(), trace)

    assert len(resources) == 1
    patient = resources[0]
    assert patient["name"][0]["text"] == "Unknown Patient"
    assert patient["gender"] == "unknown"
    assert [ext["url"] for ext in patient["extension"]] == ["traceability"]


def test_blank_name_is_not_split(mapper, trace):
    name = mapper.map_fields(ExtractedFields(patient_name="   "), trace)[0]["name"][0]

    assert name["text"] == "Unknown Patient"
    assert "family" not in name
    assert "given" not in name


def test_single_word_name_has_no_parts(mapper, trace):
    name = mapper.map_fields(ExtractedFields(patient_name=" Cher "), trace)[0]["name"][0]

    assert name["text"] == "Cher"
    assert "family" not in name


def test_partial_fields_still_emit_observations(mapper, trace):
    """Missing readings drop components and values, never whole resources"""
    fields = ExtractedFields(
        blood_pressure=BloodPressure(systolic=None, diastolic=85),
        lab=LegacyLab(test_name=None, value=5.0, unit=None),
    )

    lab, bp = _by_type(mapper.map_fields(fields, trace), "Observation")

    assert lab["code"]["text"] == "unknown"
    assert lab["valueQuantity"]["value"] == 5
    assert lab["valueQuantity"]["unit"] == "unknown"
    assert [c["code"]["text"] for c in bp["component"]] == ["Diastolic"]


def test_lab_without_value_keeps_unit(mapper, trace):
    fields = ExtractedFields(lab_tests={"hb": LabTest(value=None, unit="g/dL")})

    observation = _by_type(mapper.map_fields(fields, trace), "Observation")[0]

    assert observation["code"]["text"] == "hb"
    assert observation["valueQuantity"].get("value") is None
    assert observation["valueQuantity"]["unit"] == "g/dL"


def test_every_resource_carries_its_own_trace(mapper, trace):
    fields = ExtractedFields(
        patient_name="Jane Doe",
        blood_pressure=BloodPressure(systolic=120, diastolic=80),
        lab=LegacyLab(test_name="hemoglobin", value=13.1, unit="g/dL"),
    )

    resources = mapper.map_fields(fields, trace)

    assert len(resources) == 3
    for resource in resources:
        assert _trace_payload(resource)["trace"] == [entry.to_dict() for entry in trace]


def test_resource_ids_are_unique(mapper, trace):
    fields = ExtractedFields(lab=LegacyLab(test_name="glucose", value=98.0, unit="mg/dL"))

    first = mapper.map_fields(fields, trace)
    second = mapper.map_fields(fields, trace)

    ids = [r["id"] for r in first + second]
    assert len(set(ids)) == len(ids)


@pytest.mark.parametrize("raw,expected", [
    ("female", "female"),
    ("M", "male"),
    (" Male ", "male"),
    ("other", "other"),
    ("nonbinary", "unknown"),
    (None, "unknown"),
])
def test_normalize_gender(raw, expected):
    assert normalize_gender(raw) == expected


def test_warnings_pass_through(mapper, trace):
    validated = ValidatedFields(fields=ExtractedFields(age=130), warnings=["age_out_of_range"])

    data = mapper.map_document("doc-9", validated, trace).to_dict()

    assert data["documentId"] == "doc-9"
    assert data["fhirVersion"] == "R4"
    assert data["warnings"] == ["age_out_of_range"]


def test_map_requires_validated(mapper):
    with pytest.raises(InvalidInput) as exc_info:
        mapper.map_document("doc-1", None)

    assert exc_info.value.message == "validated is required"
