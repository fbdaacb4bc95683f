# ============================================================================
# src/fhir_flow/constants/validation_ranges.py
# ============================================================================
"""
Validation Ranges and Warning Codes
- Inclusive plausibility bounds for demographics and vitals
- Warning codes emitted by the validator
"""

AGE_RANGE = (0, 120)
SYSTOLIC_RANGE = (60, 250)
DIASTOLIC_RANGE = (30, 150)

AGE_OUT_OF_RANGE = "age_out_of_range"
BP_SYSTOLIC_OUT_OF_RANGE = "bp_systolic_out_of_range"
BP_DIASTOLIC_OUT_OF_RANGE = "bp_diastolic_out_of_range"
LAB_VALUE_NEGATIVE = "lab_value_negative"

WARNING_CODES = (
    AGE_OUT_OF_RANGE,
    BP_SYSTOLIC_OUT_OF_RANGE,
    BP_DIASTOLIC_OUT_OF_RANGE,
    LAB_VALUE_NEGATIVE,
)

# Lab candidates outside this open interval are treated as noise
# (page numbers, years, accession numbers).
LAB_VALUE_BOUNDS = (0, 10000)
MIN_LAB_NAME_LENGTH = 3
