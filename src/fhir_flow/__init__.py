# ============================================================================
# src/fhir_flow/__init__.py
# ============================================================================
"""
fhir-flow

Clinical document to FHIR pipeline:
ingest -> recognize text -> extract fields -> validate -> map to resources,
with per-patient consolidation at the gateway.
"""

__version__ = "1.0.0"
