# ============================================================================
# src/fhir_flow/config/recognition_config.py
# ============================================================================
"""
Text Recognition Settings
- Segment confidence per input kind
- Tesseract language
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RecognitionSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    TEXT_CONFIDENCE: float = Field(
        default=0.93,
        ge=0.0, le=1.0,
        description="Confidence assigned to segments from direct text input"
    )
    BINARY_CONFIDENCE: float = Field(
        default=0.85,
        ge=0.0, le=1.0,
        description="Confidence assigned to segments recognized from a binary payload"
    )
    OCR_LANGUAGE: str = Field(
        default="eng",
        description="Tesseract language code"
    )


recognition_settings = RecognitionSettings()
