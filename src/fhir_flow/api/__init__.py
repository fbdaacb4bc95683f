"""
HTTP surface: the gateway app and one app per pipeline stage.
"""

from .gateway import create_gateway_app
from .stages import (
    create_stage_app,
    create_ingestion_app,
    create_ocr_app,
    create_nlp_app,
    create_validation_app,
    create_mapping_app,
    STAGE_APP_FACTORIES,
)

__all__ = [
    "create_gateway_app",
    "create_stage_app",
    "create_ingestion_app",
    "create_ocr_app",
    "create_nlp_app",
    "create_validation_app",
    "create_mapping_app",
    "STAGE_APP_FACTORIES",
]
