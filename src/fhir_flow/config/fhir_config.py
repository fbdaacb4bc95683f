# ============================================================================
# src/fhir_flow/config/fhir_config.py
# ============================================================================
"""
FHIR Output Settings
- Version tag
- Extension URLs
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class FHIRSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    FHIR_VERSION: str = Field(
        default="R4",
        description="FHIR release reported on mapped bundles"
    )
    TRACEABILITY_EXTENSION_URL: str = Field(
        default="traceability",
        description="Extension URL carrying the serialized source trace"
    )
    AGE_EXTENSION_URL: str = Field(
        default="extracted-age",
        description="Extension URL carrying the extracted age on Patient"
    )


fhir_settings = FHIRSettings()
