# ============================================================================
# src/fhir_flow/utils/exceptions.py
# ============================================================================
"""
Custom exceptions for the fhir-flow pipeline.

Every error carries the HTTP status the stage/gateway layer answers with.
Pure components raise these; only the API layer translates them.
"""

from typing import Optional


class FhirFlowError(Exception):
    """Base exception for all pipeline errors."""
    status_code: int = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code


class InvalidInput(FhirFlowError):
    """Required field missing at a stage boundary."""
    status_code = 400


class RecognitionError(FhirFlowError):
    """Binary payload could not be decoded."""
    status_code = 500


class NotFound(FhirFlowError):
    """Read or clear referenced an unknown identity key."""
    status_code = 404


class ConfigurationError(FhirFlowError):
    """Invalid configuration."""
    pass


class UpstreamFailure(FhirFlowError):
    """A downstream stage answered non-success or timed out."""

    def __init__(self, stage: str, status_code: int, message: str):
        super().__init__(message, status_code=status_code)
        self.stage = stage

    def __str__(self) -> str:
        return f"Stage '{self.stage}' failed ({self.status_code}): {self.message}"
