# ============================================================================
# FILE: tests/unit/test_field_extractor.py
# ============================================================================
"""
Unit tests for heuristic clinical field extraction
"""

import pytest

from fhir_flow.core.context import TextSegment
from fhir_flow.extractors import FieldExtractor, extract_fields, first_match
from fhir_flow.extractors.field_extractor import (
    match_age,
    match_blood_pressure,
    match_capitalized_words,
    match_courtesy_title,
    match_gender_line,
    match_gender_suffix,
    match_lab_line,
    match_patient_prefix,
    split_lines,
)
from fhir_flow.utils.exceptions import InvalidInput


def test_sample_note_extracts_every_field(sample_clinical_text):
    fields = extract_fields(sample_clinical_text)

    assert fields.patient_name == "Jane Doe"
    assert fields.age == 45
    assert fields.gender == "female"
    assert fields.blood_pressure.systolic == 120
    assert fields.blood_pressure.diastolic == 80
    assert fields.blood_pressure.unit == "mmHg"
    assert list(fields.lab_tests) == ["hemoglobin"]
    assert fields.lab_tests["hemoglobin"].value == 13.1
    assert fields.lab_tests["hemoglobin"].unit == "g/dL"
    assert fields.lab_tests["hemoglobin"].raw == "Lab: Hemoglobin 13.1 g/dL"
    assert fields.lab.test_name == "hemoglobin"
    assert fields.lab.value == 13.1


def test_table_layout_report(sample_lab_table_text):
    fields = extract_fields(sample_lab_table_text)

    assert fields.patient_name == "Mr. Ravi Kumar"
    assert fields.age == 27
    assert fields.gender == "male"
    assert fields.blood_pressure is None
    assert list(fields.lab_tests) == ["hemoglobin", "neutrophils"]
    assert fields.lab_tests["neutrophils"].unit == "%"
    assert fields.lab.test_name == "hemoglobin"


def test_name_chain_priority():
    lines = ["Dr. Who", "Patient: Amy Pond"]
    assert first_match((match_patient_prefix, match_courtesy_title), lines) == "Amy Pond"


def test_courtesy_title_strips_annotations():
    assert match_courtesy_title(["Mrs. Rao [ref 12] (ward 3)"]) == "Mrs. Rao"


def test_capitalized_words_takes_first_delimited_part():
    assert match_capitalized_words(["Sarah Connor | MRN 8812"]) == "Sarah Connor"
    assert match_capitalized_words(["no names here"]) is None


def test_empty_patient_prefix_falls_through():
    assert match_patient_prefix(["Patient:   "]) is None


def test_age_with_units():
    assert match_age(["Age: 7 yrs"]) == 7
    assert match_age(["AGE 102 years"]) == 102
    assert match_age(["Weight: 70kg"]) is None


@pytest.mark.parametrize("line,expected", [
    ("Age/Sex: 30/F", "female"),
    ("Age/Sex: 30/m", "male"),
    ("Age/Gender: 30/Female", "female"),
])
def test_gender_suffix(line, expected):
    assert match_gender_suffix([line]) == expected


def test_gender_line_fallback():
    lines = ["Age: 30", "Gender: Other"]
    assert match_gender_suffix(lines) is None
    assert match_gender_line(lines) == "other"


def test_blood_pressure_variants():
    assert match_blood_pressure(["BP 130/85"]).systolic == 130
    assert match_blood_pressure(["bp: 90/60 mmHg"]).diastolic == 60
    assert match_blood_pressure(["Pulse 72"]) is None


def test_lab_line_patterns():
    key, test = match_lab_line("WBC 7.2 K/uL")
    assert key == "wbc"
    assert test.value == 7.2
    assert test.unit == "K/uL"

    key, test = match_lab_line("MEAN CELL VOLUME 88 fL 80-100")
    assert key == "mean_cell_volume"


@pytest.mark.parametrize("line", [
    "HB 13 g/dL",           # name too short
    "YEAR 20240",           # value too large
    "Lab: Hb 13 g/dL",      # name too short, legacy pattern
    "Hemoglobin was normal",
])
def test_lab_line_noise_rejected(line):
    assert match_lab_line(line) is None


def test_repeated_lab_keeps_last_value():
    fields = extract_fields("GLUCOSE 90 mg/dL\nGLUCOSE 110 mg/dL")
    assert fields.lab_tests["glucose"].value == 110


def test_no_matches_leaves_fields_empty():
    fields = extract_fields("nothing useful here")

    assert fields.patient_name is None
    assert fields.age is None
    assert fields.gender is None
    assert fields.blood_pressure is None
    assert fields.lab_tests == {}
    assert fields.lab is None
    assert fields.to_dict()["labTests"] is None


def test_split_lines_trims_and_drops_blanks():
    assert split_lines("  a  \n\n\nb\n") == ["a", "b"]


def test_extractor_builds_trace():
    segments = [
        TextSegment(id="doc-1-seg-1", text="Patient: Jane Doe", confidence=0.93),
        TextSegment(id="doc-1-seg-2", text="Age: 45", confidence=0.93, page=1),
    ]

    result = FieldExtractor().extract("doc-1", segments)
    data = result.to_dict()

    assert data["documentId"] == "doc-1"
    assert data["extracted"]["patientName"] == "Jane Doe"
    assert data["extracted"]["age"] == 45
    assert data["trace"] == [
        {"segmentId": "doc-1-seg-1", "confidence": 0.93, "page": 1},
        {"segmentId": "doc-1-seg-2", "confidence": 0.93, "page": 1},
    ]


def test_extractor_requires_segments():
    with pytest.raises(InvalidInput) as exc_info:
        FieldExtractor().extract("doc-1", None)

    assert exc_info.value.message == "textSegments is required"


def test_extractor_accepts_empty_segment_list():
    result = FieldExtractor().extract("doc-1", [])

    assert result.fields.patient_name is None
    assert result.trace == []
