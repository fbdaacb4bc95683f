# ============================================================================
# FILE: tests/conftest.py
# ============================================================================
"""
Pytest configuration and shared fixtures for testing.
"""

import base64
import io
from typing import Any, Dict, List, Optional

import pytest
from PIL import Image

from fhir_flow.config import StoreSettings
from fhir_flow.constants import PLACEHOLDER_TEXT
from fhir_flow.core import PatientConsolidationStore
from fhir_flow.core.context import DocumentEnvelope
from fhir_flow.utils.exceptions import UpstreamFailure
from fhir_flow.utils.metrics import get_metrics


@pytest.fixture
def sample_clinical_text():
    """The five-line sample note used across the pipeline tests"""
    return PLACEHOLDER_TEXT


@pytest.fixture
def sample_lab_table_text():
    """Lab report text in the uppercase table layout"""
    return (
        "CITY DIAGNOSTICS\n"
        "Mr. Ravi Kumar (OP-1182)\n"
        "Age/Sex: 27YRS/M\n"
        "HEMOGLOBIN 15 g/dl 13-17\n"
        "NEUTROPHILS 79 % 40-80\n"
        "Page 2 of 2\n"
    )


@pytest.fixture
def png_data_url():
    """Small white PNG as a data URL"""
    buffer = io.BytesIO()
    Image.new("RGB", (4, 4), "white").save(buffer, format="PNG")
    return "data:image/png;base64," + base64.b64encode(buffer.getvalue()).decode()


@pytest.fixture
def store_settings():
    return StoreSettings(SEED_DEMO_PATIENTS=False)


@pytest.fixture
def store(store_settings):
    return PatientConsolidationStore(store_settings)


@pytest.fixture(autouse=True)
def reset_metrics():
    get_metrics().reset()
    yield
    get_metrics().reset()


def make_envelope(**overrides) -> DocumentEnvelope:
    data = {
        "document_id": "doc-1",
        "source_type": "upload",
        "content_type": "text/plain",
        "content": "Patient: Jane Doe",
    }
    data.update(overrides)
    return DocumentEnvelope(**data)


def make_bundle(name: Optional[str] = "Jane Doe", warnings: Optional[List[str]] = None,
                observations: int = 1) -> Dict[str, Any]:
    """Mapped bundle in wire form"""
    patient: Dict[str, Any] = {"resourceType": "Patient", "id": "patient-1", "gender": "female"}
    if name is not None:
        patient["name"] = [{"text": name}]

    resources = [patient] + [
        {"resourceType": "Observation", "id": f"obs-{i}", "status": "final"}
        for i in range(observations)
    ]
    return {
        "documentId": "doc-1",
        "fhirVersion": "R4",
        "warnings": list(warnings or []),
        "resources": resources,
    }


class FakeTransport:
    """
    Stand-in for StageClient.

    `responses` maps stage name to a dict (returned), an exception (raised)
    or a callable taking the payload.
    """

    def __init__(self, responses: Dict[str, Any], statuses: Optional[Dict[str, Any]] = None):
        self.responses = responses
        self.statuses = statuses or {}
        self.calls: List[Dict[str, Any]] = []

    async def post_json(self, stage, url, payload, timeout=None):
        self.calls.append({"stage": stage, "url": url, "payload": payload, "timeout": timeout})
        response = self.responses[stage]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(payload)
        return response

    async def get_status(self, url, timeout=None):
        for name, status in self.statuses.items():
            if url.startswith(name):
                if isinstance(status, Exception):
                    raise status
                return status
        raise ConnectionError(f"no route to {url}")

    async def close(self):
        pass


def stage_failure(stage: str, status: int, message: str) -> UpstreamFailure:
    return UpstreamFailure(stage, status, message)


@pytest.fixture
def envelope_factory():
    return make_envelope


@pytest.fixture
def bundle_factory():
    return make_bundle


@pytest.fixture
def transport_factory():
    return FakeTransport
