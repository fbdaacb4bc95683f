# ============================================================================
# src/fhir_flow/fhir_utils/extensions.py
# ============================================================================
"""
Extensions shared by every mapped resource, plus serialization of
fhir.resources models into plain wire dicts.
"""

import json
from typing import Any, Dict, List, Optional

from fhir.resources.extension import Extension

from ..config import fhir_settings
from ..core.context import TraceEntry, trace_to_list


def traceability_extension(trace: List[TraceEntry], raw: Optional[str] = None) -> Extension:
    """Serialize the source trace (and optionally the raw line) into an extension."""
    payload: Dict[str, Any] = {"trace": trace_to_list(trace)}
    if raw is not None:
        payload["raw"] = raw
    return Extension(
        url=fhir_settings.TRACEABILITY_EXTENSION_URL,
        valueString=json.dumps(payload),
    )


def age_extension(age: int) -> Extension:
    return Extension(url=fhir_settings.AGE_EXTENSION_URL, valueInteger=age)


def resource_to_dict(resource) -> Dict[str, Any]:
    """JSON-safe dict for a resource (Decimals and dates already rendered)."""
    data = json.loads(resource.model_dump_json())
    data.setdefault("resourceType", type(resource).__name__)
    return data
