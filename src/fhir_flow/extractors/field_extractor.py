# ============================================================================
# src/fhir_flow/extractors/field_extractor.py
# ============================================================================
"""
Field Extractor

Heuristic extraction of structured clinical facts from recognized lines.

Each fact is produced by an ordered chain of independent matchers. A matcher
takes the document lines and returns a value or None; the first non-None
result in a chain wins and later matchers in that chain are not tried.
Chains never affect each other, and a chain that finds nothing leaves its
field None rather than failing.

Chains:
- name:    "Patient:" line -> courtesy title line -> first Two Capitalized words
- age:     first number on the first line mentioning "age"
- gender:  "/M" style suffix on the age line -> "Gender:" line
- bp:      "BP: 120/80" style line
- labs:    every line, uppercase-table pattern then "Lab:" pattern
"""

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from ..constants import LAB_VALUE_BOUNDS, MIN_LAB_NAME_LENGTH
from ..core.context import (
    BloodPressure,
    ExtractedFields,
    LabTest,
    LegacyLab,
    TextSegment,
    TraceEntry,
    trace_to_list,
)
from ..utils.exceptions import InvalidInput

logger = logging.getLogger(__name__)

T = TypeVar("T")
Matcher = Callable[[List[str]], Optional[T]]

# ---------------------------------------------------------------------------
# Patterns
# ---------------------------------------------------------------------------

PATIENT_PREFIX = re.compile(r"^patient:\s*", re.IGNORECASE)
COURTESY_TITLE = re.compile(r"^(Mr\.?|Ms\.?|Mrs\.?|Dr\.?)\s+[A-Z]", re.IGNORECASE)
ANNOTATION = re.compile(r"\[.*?\]|\(.*?\)")
TWO_CAPITALIZED_WORDS = re.compile(r"^[A-Z][a-z]+\s+[A-Z][a-z]+")
NAME_DELIMITERS = re.compile(r"\s{2,}|:|\||/")

AGE_LINE = re.compile(r"age", re.IGNORECASE)
AGE_VALUE = re.compile(r"(\d{1,3})\s*(yrs?|years?|y)?", re.IGNORECASE)
GENDER_SUFFIX = re.compile(r"/(M|F|male|female)", re.IGNORECASE)
GENDER_PREFIX = re.compile(r"^gender:\s*", re.IGNORECASE)

BP_LINE = re.compile(r"bp:?\s*\d{2,3}/\d{2,3}", re.IGNORECASE)
BP_VALUE = re.compile(r"(\d{2,3})/(\d{2,3})")

LAB_PATTERNS: Tuple[re.Pattern, ...] = (
    # "HEMOGLOBIN 15 g/dl 13-17", "NEUTROPHILS 79 % 40-80", "WBC 7.2 K/uL"
    re.compile(r"^([A-Z][A-Z\s,]+?)\s+(\d+(?:\.\d+)?)\s*([a-zA-Z/%]+)?(?:\s+\d|$)"),
    # "Lab: Hemoglobin 13.1 g/dL"
    re.compile(r"^lab:\s*([a-zA-Z\s]+?)\s+(\d+(?:\.\d+)?)\s*([a-zA-Z/]+)?", re.IGNORECASE),
)

GENDER_ABBREVIATIONS = {"m": "male", "f": "female"}


# ---------------------------------------------------------------------------
# Chain evaluation
# ---------------------------------------------------------------------------

def first_match(matchers: Sequence[Matcher], lines: List[str]) -> Optional[T]:
    """Run matchers in priority order; the first non-None result wins."""
    for matcher in matchers:
        result = matcher(lines)
        if result is not None:
            return result
    return None


def _find_line(lines: List[str], predicate: Callable[[str], bool]) -> Optional[str]:
    return next((line for line in lines if predicate(line)), None)


# ---------------------------------------------------------------------------
# Name
# ---------------------------------------------------------------------------

def match_patient_prefix(lines: List[str]) -> Optional[str]:
    line = _find_line(lines, lambda l: l.lower().startswith("patient:"))
    if line is None:
        return None
    return PATIENT_PREFIX.sub("", line).strip() or None


def match_courtesy_title(lines: List[str]) -> Optional[str]:
    line = _find_line(lines, lambda l: COURTESY_TITLE.match(l) is not None)
    if line is None:
        return None
    return ANNOTATION.sub("", line).strip() or None


def match_capitalized_words(lines: List[str]) -> Optional[str]:
    line = _find_line(lines, lambda l: TWO_CAPITALIZED_WORDS.match(l) is not None)
    if line is None:
        return None
    for part in NAME_DELIMITERS.split(line):
        if TWO_CAPITALIZED_WORDS.match(part):
            return part.strip()
    return None


NAME_MATCHERS: Tuple[Matcher, ...] = (
    match_patient_prefix,
    match_courtesy_title,
    match_capitalized_words,
)


# ---------------------------------------------------------------------------
# Age / gender
# ---------------------------------------------------------------------------

def _age_line(lines: List[str]) -> Optional[str]:
    return _find_line(lines, lambda l: AGE_LINE.search(l) is not None)


def match_age(lines: List[str]) -> Optional[int]:
    line = _age_line(lines)
    if line is None:
        return None
    match = AGE_VALUE.search(line)
    return int(match.group(1)) if match else None


def match_gender_suffix(lines: List[str]) -> Optional[str]:
    line = _age_line(lines)
    if line is None:
        return None
    match = GENDER_SUFFIX.search(line)
    if not match:
        return None
    gender = match.group(1).lower()
    return GENDER_ABBREVIATIONS.get(gender, gender)


def match_gender_line(lines: List[str]) -> Optional[str]:
    line = _find_line(lines, lambda l: l.lower().startswith("gender:"))
    if line is None:
        return None
    return GENDER_PREFIX.sub("", line).strip().lower() or None


GENDER_MATCHERS: Tuple[Matcher, ...] = (
    match_gender_suffix,
    match_gender_line,
)


# ---------------------------------------------------------------------------
# Blood pressure
# ---------------------------------------------------------------------------

def match_blood_pressure(lines: List[str]) -> Optional[BloodPressure]:
    line = _find_line(lines, lambda l: BP_LINE.search(l) is not None)
    if line is None:
        return None
    match = BP_VALUE.search(line)
    if not match:
        return None
    return BloodPressure(systolic=int(match.group(1)), diastolic=int(match.group(2)), unit="mmHg")


# ---------------------------------------------------------------------------
# Lab tests
# ---------------------------------------------------------------------------

def match_lab_line(line: str) -> Optional[Tuple[str, LabTest]]:
    """
    Match one line against the lab patterns.

    The first pattern that matches decides the line, even when its candidate
    is then rejected as noise.
    """
    for pattern in LAB_PATTERNS:
        match = pattern.match(line)
        if not match:
            continue

        test_key = re.sub(r"\s+", "_", match.group(1).strip().lower())
        value = float(match.group(2))
        low, high = LAB_VALUE_BOUNDS

        if len(test_key) >= MIN_LAB_NAME_LENGTH and low < value < high:
            return test_key, LabTest(value=value, unit=match.group(3) or None, raw=line)
        return None

    return None


def match_lab_tests(lines: List[str]) -> Dict[str, LabTest]:
    lab_tests: Dict[str, LabTest] = {}
    for line in lines:
        matched = match_lab_line(line)
        if matched:
            key, test = matched
            lab_tests[key] = test
    return lab_tests


def legacy_lab(lab_tests: Dict[str, LabTest]) -> Optional[LegacyLab]:
    """Mirror the first accepted test into the single-value shape."""
    if not lab_tests:
        return None
    name, test = next(iter(lab_tests.items()))
    return LegacyLab(test_name=name, value=test.value, unit=test.unit)


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def split_lines(text: str) -> List[str]:
    return [line.strip() for line in re.split(r"\n+", text) if line.strip()]


def extract_fields(text: str) -> ExtractedFields:
    """Run every matcher chain over the working text."""
    lines = split_lines(text)
    lab_tests = match_lab_tests(lines)

    return ExtractedFields(
        patient_name=first_match(NAME_MATCHERS, lines),
        age=match_age(lines),
        gender=first_match(GENDER_MATCHERS, lines),
        blood_pressure=match_blood_pressure(lines),
        lab_tests=lab_tests,
        lab=legacy_lab(lab_tests),
    )


@dataclass
class ExtractionResult:
    document_id: Optional[str]
    fields: ExtractedFields
    trace: List[TraceEntry] = field(default_factory=list)

    def to_dict(self):
        return {
            "documentId": self.document_id,
            "extracted": self.fields.to_dict(),
            "trace": trace_to_list(self.trace),
        }


class FieldExtractor:

    def extract(self, document_id: Optional[str], segments: Optional[Sequence[TextSegment]]) -> ExtractionResult:
        """
        Raises:
            InvalidInput: no segment list was supplied
        """
        if segments is None:
            raise InvalidInput("textSegments is required")

        working_text = "\n".join(segment.text for segment in segments)
        fields = extract_fields(working_text)

        logger.info(
            f"Extracted fields for {document_id}: name={fields.patient_name is not None}, "
            f"age={fields.age}, gender={fields.gender}, bp={fields.blood_pressure is not None}, "
            f"labs={len(fields.lab_tests)}"
        )

        return ExtractionResult(
            document_id=document_id,
            fields=fields,
            trace=[TraceEntry.from_segment(segment) for segment in segments],
        )
