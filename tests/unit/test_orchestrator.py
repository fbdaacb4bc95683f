# ============================================================================
# FILE: tests/unit/test_orchestrator.py
# ============================================================================
"""
Unit tests for the pipeline orchestrator
"""

import pytest
from fastapi.testclient import TestClient

from fhir_flow.api import create_stage_app
from fhir_flow.constants import PLACEHOLDER_TEXT
from fhir_flow.core import DEFAULT_STAGES, PipelineOrchestrator, StageDescriptor
from fhir_flow.utils.exceptions import ConfigurationError, InvalidInput, UpstreamFailure
from fhir_flow.utils.metrics import get_metrics

STAGE_URLS = {
    "ingestion": "http://ingest",
    "ocr": "http://ocr",
    "nlp": "http://nlp",
    "validation": "http://validate",
    "mapping": "http://map",
}


@pytest.fixture
def stage_responses(bundle_factory):
    return {
        "ingestion": {"documentId": "doc-1", "content": "Patient: Jane Doe", "docType": "clinical_note",
                      "sourceType": "upload", "contentType": "text/plain"},
        "ocr": {"documentId": "doc-1", "textSegments": [{"id": "doc-1-seg-1", "text": "Patient: Jane Doe"}]},
        "nlp": {"documentId": "doc-1", "extracted": {"patientName": "Jane Doe"}, "trace": []},
        "validation": {"documentId": "doc-1", "validated": {"patientName": "Jane Doe"}, "warnings": []},
        "mapping": bundle_factory(observations=1),
    }


@pytest.mark.asyncio
async def test_successful_run_consolidates(store, transport_factory, stage_responses):
    transport = transport_factory(stage_responses)
    orchestrator = PipelineOrchestrator(transport, store, STAGE_URLS)

    outcome = await orchestrator.run({"content": "Patient: Jane Doe"})

    assert [call["stage"] for call in transport.calls] == ["ingestion", "ocr", "nlp", "validation", "mapping"]
    assert transport.calls[0]["url"] == "http://ingest/ingest"
    assert transport.calls[4]["url"] == "http://map/map"
    assert outcome.state == "consolidated"
    assert outcome.output == stage_responses["mapping"]
    assert outcome.patient_profile.id == "jane doe"
    assert store.stats() == {"patients": 1, "uploads": 1, "resources": 2}

    body = outcome.to_dict()
    assert body["pipeline"] == "ok"
    assert body["patientProfile"]["displayName"] == "Jane Doe"


@pytest.mark.asyncio
async def test_each_stage_receives_previous_output(store, transport_factory, stage_responses):
    transport = transport_factory(stage_responses)
    document = {"content": "Patient: Jane Doe"}

    await PipelineOrchestrator(transport, store, STAGE_URLS).run(document)

    payloads = [call["payload"] for call in transport.calls]
    assert payloads[0] == document
    assert payloads[1] == stage_responses["ingestion"]
    assert payloads[2] == stage_responses["ocr"]
    assert payloads[3] == stage_responses["nlp"]
    assert payloads[4] == stage_responses["validation"]


@pytest.mark.asyncio
async def test_upload_uses_classified_document_id(store, transport_factory, stage_responses):
    transport = transport_factory(stage_responses)

    await PipelineOrchestrator(transport, store, STAGE_URLS).run({"content": "Patient: Jane Doe"})

    assert store.uploads()[0].document_id == "doc-1"
    assert store.resources()[0].document_id == "doc-1"


@pytest.mark.asyncio
async def test_stage_failure_short_circuits(store, transport_factory, stage_responses):
    stage_responses["nlp"] = UpstreamFailure("nlp", 400, "textSegments is required")
    transport = transport_factory(stage_responses)

    with pytest.raises(UpstreamFailure) as exc_info:
        await PipelineOrchestrator(transport, store, STAGE_URLS).run({"content": "x"})

    assert exc_info.value.stage == "nlp"
    assert exc_info.value.status_code == 400
    assert exc_info.value.message == "textSegments is required"
    assert [call["stage"] for call in transport.calls] == ["ingestion", "ocr", "nlp"]
    assert store.stats() == {"patients": 0, "uploads": 0, "resources": 0}
    assert store.activity() == []


@pytest.mark.asyncio
async def test_mapping_timeout_writes_nothing(store, transport_factory, stage_responses):
    stage_responses["mapping"] = UpstreamFailure("mapping", 504, "mapping stage timed out")
    transport = transport_factory(stage_responses)

    with pytest.raises(UpstreamFailure) as exc_info:
        await PipelineOrchestrator(transport, store, STAGE_URLS).run({"content": "x"})

    assert exc_info.value.status_code == 504
    assert store.stats()["uploads"] == 0
    assert get_metrics().get_counter("pipeline_failures") == 1
    assert get_metrics().get_counter("stage_mapping_failures") == 1


@pytest.mark.asyncio
async def test_non_object_stage_output_is_counted_failure(store, transport_factory, stage_responses):
    stage_responses["ocr"] = lambda payload: ["Patient: Jane Doe"]
    transport = transport_factory(stage_responses)

    with pytest.raises(UpstreamFailure) as exc_info:
        await PipelineOrchestrator(transport, store, STAGE_URLS).run({"content": "x"})

    assert exc_info.value.stage == "ocr"
    assert exc_info.value.status_code == 502
    assert [call["stage"] for call in transport.calls] == ["ingestion", "ocr"]
    assert store.stats() == {"patients": 0, "uploads": 0, "resources": 0}
    assert get_metrics().get_counter("pipeline_failures") == 1
    assert get_metrics().get_counter("stage_ocr_failures") == 1


@pytest.mark.parametrize("document", [None, {}, {"content": ""}, {"fileName": "a.png"}])
@pytest.mark.asyncio
async def test_document_without_payload_rejected(store, transport_factory, stage_responses, document):
    transport = transport_factory(stage_responses)

    with pytest.raises(InvalidInput):
        await PipelineOrchestrator(transport, store, STAGE_URLS).run(document)

    assert transport.calls == []


@pytest.mark.asyncio
async def test_stage_timeout_is_passed_to_transport(store, transport_factory, stage_responses):
    stages = [StageDescriptor(s.name, s.path, s.state, timeout=2.5) for s in DEFAULT_STAGES]
    transport = transport_factory(stage_responses)

    await PipelineOrchestrator(transport, store, STAGE_URLS, stages).run({"content": "x"})

    assert {call["timeout"] for call in transport.calls} == {2.5}


@pytest.mark.asyncio
async def test_metrics_recorded(store, transport_factory, stage_responses):
    transport = transport_factory(stage_responses)

    await PipelineOrchestrator(transport, store, STAGE_URLS).run({"content": "x"})

    metrics = get_metrics()
    assert metrics.get_counter("pipeline_runs") == 1
    assert metrics.get_counter("pipeline_successes") == 1
    assert metrics.get_timer_stats("stage_ocr")["count"] == 1


def test_missing_stage_url_rejected(store, transport_factory):
    with pytest.raises(ConfigurationError):
        PipelineOrchestrator(transport_factory({}), store, {"ingestion": "http://ingest"})


def _over_http(stage: str, path: str):
    """Route a stage call through that stage's own app"""
    client = TestClient(create_stage_app(stage))

    def call(payload):
        response = client.post(path, json=payload)
        if response.status_code >= 400:
            raise UpstreamFailure(stage, response.status_code, response.json()["error"])
        return response.json()

    return call


@pytest.mark.asyncio
async def test_sample_note_through_stage_apps(store, transport_factory):
    """Sample note runs all five stage apps and lands in the store"""
    transport = transport_factory({s.name: _over_http(s.name, s.path) for s in DEFAULT_STAGES})
    orchestrator = PipelineOrchestrator(transport, store, STAGE_URLS)

    outcome = await orchestrator.run({
        "documentId": "doc-42",
        "sourceType": "upload",
        "contentType": "text/plain",
        "content": PLACEHOLDER_TEXT,
    })

    record = store.get("jane doe")
    assert outcome.patient_profile is record
    assert record.display_name == "Jane Doe"
    assert len(record.logs) == 1
    assert list(record.logs)[0].document_id == "doc-42"
    assert list(record.logs)[0].warnings == []

    observations = [r for r in record.resources if r["resourceType"] == "Observation"]
    assert [o["code"]["text"] for o in observations] == ["hemoglobin", "Blood Pressure"]
    assert observations[0]["valueQuantity"]["value"] == 13.1
    assert [c["valueQuantity"]["value"] for c in observations[1]["component"]] == [120, 80]

    assert store.stats() == {"patients": 1, "uploads": 1, "resources": 3}
    assert get_metrics().get_counter("pipeline_successes") == 1
