# ============================================================================
# src/fhir_flow/config/service_config.py
# ============================================================================
"""
Service Topology Settings
- Stage base URLs
- Per-stage call timeout
- Health probe timeout
- Request body limit
"""

from typing import Dict
from urllib.parse import urlparse

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ServiceSettings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    INGESTION_URL: str = Field(
        default="http://localhost:3001",
        description="Base URL of the ingestion stage"
    )
    OCR_URL: str = Field(
        default="http://localhost:3002",
        description="Base URL of the text recognition stage"
    )
    NLP_URL: str = Field(
        default="http://localhost:3003",
        description="Base URL of the field extraction stage"
    )
    VALIDATION_URL: str = Field(
        default="http://localhost:3004",
        description="Base URL of the validation stage"
    )
    MAPPING_URL: str = Field(
        default="http://localhost:3005",
        description="Base URL of the resource mapping stage"
    )
    STAGE_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        gt=0,
        description="Timeout applied to every stage call made by the orchestrator"
    )
    HEALTH_TIMEOUT_SECONDS: float = Field(
        default=5.0,
        gt=0,
        description="Timeout applied to each health probe"
    )
    GATEWAY_PORT: int = Field(
        default=3000,
        description="Port the gateway listens on"
    )
    MAX_REQUEST_BYTES: int = Field(
        default=5 * 1024 * 1024,
        description="Largest request body a stage accepts"
    )

    def stage_urls(self) -> Dict[str, str]:
        """Stage name -> base URL, in pipeline order."""
        return {
            "ingestion": self.INGESTION_URL.rstrip("/"),
            "ocr": self.OCR_URL.rstrip("/"),
            "nlp": self.NLP_URL.rstrip("/"),
            "validation": self.VALIDATION_URL.rstrip("/"),
            "mapping": self.MAPPING_URL.rstrip("/"),
        }

    def stage_port(self, stage: str) -> int:
        """Port a stage listens on, read from its base URL."""
        url = self.stage_urls()[stage]
        return urlparse(url).port or 80


service_settings = ServiceSettings()
