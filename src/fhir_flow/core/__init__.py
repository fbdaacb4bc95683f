# ============================================================================
# src/fhir_flow/core/__init__.py
# ============================================================================
"""
Core components for the fhir-flow pipeline.
"""

from .bounded_list import BoundedList
from .context import DocumentEnvelope, PatientRecord

# Consolidation store
from .patient_store import (
    PatientConsolidationStore,
    normalize_patient_name,
    identity_key,
    patient_display_name,
)

# Stage transport and orchestration
from .stage_client import StageClient
from .orchestrator import (
    PipelineOrchestrator,
    PipelineOutcome,
    StageDescriptor,
    DEFAULT_STAGES,
)
from .health import HealthAggregator

__all__ = [
    'BoundedList',
    'DocumentEnvelope',
    'PatientRecord',
    'PatientConsolidationStore',
    'normalize_patient_name',
    'identity_key',
    'patient_display_name',
    'StageClient',
    'PipelineOrchestrator',
    'PipelineOutcome',
    'StageDescriptor',
    'DEFAULT_STAGES',
    'HealthAggregator',
]
