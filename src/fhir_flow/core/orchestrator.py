# ============================================================================
# src/fhir_flow/core/orchestrator.py
# ============================================================================
"""
Pipeline Orchestrator

Runs one document through the five stage services, strictly in order:

    received -> classified -> recognized -> extracted -> validated
             -> mapped -> consolidated

Each transition is one network call whose payload is the previous stage's
response. The first failure aborts the run and is re-raised unchanged
(stage name, status, message); nothing is written to the consolidation
store unless all five stages succeed.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Sequence

from ..config import service_settings
from ..utils.exceptions import ConfigurationError, InvalidInput, UpstreamFailure
from ..utils.logging import log_performance
from ..utils.metrics import get_metrics, time_operation
from .context import DocumentEnvelope, PatientRecord
from .patient_store import PatientConsolidationStore
from .stage_client import BAD_GATEWAY

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StageDescriptor:
    name: str
    path: str
    # State the run is in once this stage returns
    state: str
    timeout: Optional[float] = None


DEFAULT_STAGES = (
    StageDescriptor("ingestion", "/ingest", "classified"),
    StageDescriptor("ocr", "/ocr", "recognized"),
    StageDescriptor("nlp", "/nlp", "extracted"),
    StageDescriptor("validation", "/validate", "validated"),
    StageDescriptor("mapping", "/map", "mapped"),
)


@dataclass
class PipelineOutcome:
    output: Dict[str, Any]
    patient_profile: PatientRecord
    state: str = "consolidated"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pipeline": "ok",
            "output": self.output,
            "patientProfile": self.patient_profile.to_dict(),
        }


class PipelineOrchestrator:
    """
    Sequential fold over the stage services.

    The transport only needs an async post_json(stage, url, payload, timeout)
    that returns the decoded body or raises UpstreamFailure.
    """

    def __init__(
        self,
        transport,
        store: PatientConsolidationStore,
        stage_urls: Optional[Mapping[str, str]] = None,
        stages: Sequence[StageDescriptor] = DEFAULT_STAGES,
    ):
        self.transport = transport
        self.store = store
        self.stage_urls = dict(stage_urls or service_settings.stage_urls())
        self.stages = tuple(stages)
        self.logger = logging.getLogger(__name__)

        missing = [stage.name for stage in self.stages if stage.name not in self.stage_urls]
        if missing:
            raise ConfigurationError(f"No URL configured for stages: {missing}")

    @log_performance(logger, "pipeline run")
    async def run(self, document: Optional[Dict[str, Any]]) -> PipelineOutcome:
        """
        Process one document end to end.

        Raises:
            InvalidInput: document has neither content nor fileContent
            UpstreamFailure: a stage failed; its status and message are kept
        """
        if not document or not DocumentEnvelope.from_dict(document).has_payload:
            raise InvalidInput("document.content or document.fileContent is required")

        metrics = get_metrics()
        metrics.increment("pipeline_runs")

        state = "received"
        payload: Dict[str, Any] = document
        classified: Optional[DocumentEnvelope] = None

        with time_operation("pipeline"):
            for stage in self.stages:
                url = f"{self.stage_urls[stage.name]}{stage.path}"
                self.logger.debug(f"{state} -> {stage.name} ({url})", extra={"stage": stage.name})

                try:
                    with time_operation(f"stage_{stage.name}"):
                        payload = await self.transport.post_json(
                            stage.name, url, payload, timeout=stage.timeout
                        )
                    if not isinstance(payload, dict):
                        raise UpstreamFailure(
                            stage.name, BAD_GATEWAY, f"{stage.name} stage returned a non-object body"
                        )
                except UpstreamFailure as e:
                    metrics.increment("pipeline_failures")
                    metrics.increment(f"stage_{stage.name}_failures")
                    self.logger.error(f"Pipeline aborted in state '{state}': {e}", extra={"stage": stage.name})
                    raise

                state = stage.state
                if classified is None:
                    classified = DocumentEnvelope.from_dict(payload)

            record = await self.store.consolidate(payload, classified)

        metrics.increment("pipeline_successes")
        self.logger.info(
            f"Document {classified.document_id} consolidated into '{record.id}' "
            f"({len(payload.get('resources') or [])} resources)"
        )

        return PipelineOutcome(output=payload, patient_profile=record)
