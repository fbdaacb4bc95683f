# ============================================================================
# src/fhir_flow/config/store_config.py
# ============================================================================
"""
Consolidation Store Settings
- Bounded list capacities (per record and global)
- Activity feed read limit
- Demo seeding
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class StoreSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    MAX_PATIENT_UPLOADS: int = Field(
        default=5,
        ge=1,
        description="Image uploads kept per patient record"
    )
    MAX_PATIENT_LOGS: int = Field(
        default=100,
        ge=1,
        description="Pipeline log entries kept per patient record"
    )
    MAX_UPLOADS: int = Field(
        default=100,
        ge=1,
        description="Global upload log capacity"
    )
    MAX_RESOURCES: int = Field(
        default=200,
        ge=1,
        description="Global resource log capacity"
    )
    MAX_ACTIVITY: int = Field(
        default=50,
        ge=1,
        description="Global activity feed capacity"
    )
    ACTIVITY_FEED_LIMIT: int = Field(
        default=20,
        ge=1,
        description="Events returned by the activity endpoint"
    )
    SEED_DEMO_PATIENTS: bool = Field(
        default=True,
        description="Seed demo patient records at gateway startup"
    )


store_settings = StoreSettings()
