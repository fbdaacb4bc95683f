# ============================================================================
# src/fhir_flow/constants/samples.py
# ============================================================================
"""
Fixed Sample Data
- Placeholder text used when recognition produces nothing
- Demo patients seeded into the gateway store
"""

PLACEHOLDER_TEXT = (
    "Patient: Jane Doe\n"
    "Age: 45\n"
    "Gender: female\n"
    "BP: 120/80 mmHg\n"
    "Lab: Hemoglobin 13.1 g/dL"
)

DEMO_PATIENTS = [
    {
        "display_name": "Aarav Shah",
        "gender": "male",
        "age": 34,
        "lab": {"test_name": "Hemoglobin", "value": 14.2, "unit": "g/dL"},
    },
    {
        "display_name": "Isha Verma",
        "gender": "female",
        "age": 29,
        "lab": {"test_name": "Hemoglobin", "value": 12.8, "unit": "g/dL"},
    },
    {
        "display_name": "Rohan Iyer",
        "gender": "male",
        "age": 41,
        "lab": {"test_name": "Hemoglobin", "value": 15.1, "unit": "g/dL"},
    },
]

UNKNOWN_PATIENT = "Unknown Patient"
