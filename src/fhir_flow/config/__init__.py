# ============================================================================
# src/fhir_flow/config/__init__.py
# ============================================================================
"""
Convenient imports for all settings
"""

from .service_config import service_settings, ServiceSettings
from .store_config import store_settings, StoreSettings
from .fhir_config import fhir_settings, FHIRSettings
from .recognition_config import recognition_settings, RecognitionSettings
from .logging_config import logging_settings, LoggingSettings
