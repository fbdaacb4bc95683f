# ============================================================================
# src/fhir_flow/api/gateway.py
# ============================================================================
"""
Gateway API

Runs the five-stage pipeline for submitted documents and serves the
consolidated patient store.

Endpoints:
- POST /process                          run the pipeline for one document
- GET  /api/patients                     record summaries
- GET  /api/patients/{id}                one record
- POST /api/patients/{id}/images/clear   drop a record's image history
- GET  /api/uploads | /api/resources     global logs
- GET  /api/stats | /api/activity        counts and recent events
- GET  /api/health                       stage health fan-out
- GET  /api/metrics                      pipeline counters and timers
- GET  /health                           gateway liveness
"""

import logging
from contextlib import asynccontextmanager
from typing import Any, Dict, Optional

from fastapi import FastAPI

from ..config import store_settings
from ..core import HealthAggregator, PatientConsolidationStore, PipelineOrchestrator, StageClient
from ..utils.metrics import get_metrics
from .errors import configure_app
from .schemas import ProcessRequest

logger = logging.getLogger(__name__)


def create_gateway_app(
    store: Optional[PatientConsolidationStore] = None,
    orchestrator: Optional[PipelineOrchestrator] = None,
    health: Optional[HealthAggregator] = None,
    client: Optional[StageClient] = None,
    seed_demo: Optional[bool] = None,
) -> FastAPI:
    """
    Build the gateway. Components not supplied are wired to a shared
    StageClient pointed at the configured stage URLs.
    """
    store = store or PatientConsolidationStore()
    client = client or StageClient()
    orchestrator = orchestrator or PipelineOrchestrator(client, store)
    health = health or HealthAggregator(client)
    seed_demo = store_settings.SEED_DEMO_PATIENTS if seed_demo is None else seed_demo

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if seed_demo:
            store.seed_demo_patients()
        logger.info("Gateway ready")
        yield
        await client.close()

    app = FastAPI(
        title="FHIR Flow Gateway",
        description="Clinical document to FHIR pipeline with patient consolidation",
        version="1.0.0",
        lifespan=lifespan,
    )
    configure_app(app)

    app.state.store = store
    app.state.orchestrator = orchestrator

    @app.get("/health")
    async def liveness():
        return {"status": "ok"}

    @app.post("/process")
    async def process(request: ProcessRequest) -> Dict[str, Any]:
        outcome = await orchestrator.run(request.document)
        return outcome.to_dict()

    # ========================================================================
    # Patient records
    # ========================================================================

    @app.get("/api/patients")
    async def list_patients():
        return {"patients": store.list()}

    @app.get("/api/patients/{patient_id}")
    async def get_patient(patient_id: str):
        return store.get(patient_id).to_dict()

    @app.post("/api/patients/{patient_id}/images/clear")
    async def clear_patient_images(patient_id: str):
        await store.clear_images(patient_id)
        return {"status": "cleared"}

    # ========================================================================
    # Global logs
    # ========================================================================

    @app.get("/api/uploads")
    async def list_uploads():
        return {"uploads": [entry.to_dict() for entry in store.uploads()]}

    @app.get("/api/resources")
    async def list_resources():
        return {"resources": [entry.to_dict() for entry in store.resources()]}

    @app.get("/api/stats")
    async def stats():
        return store.stats()

    @app.get("/api/activity")
    async def activity():
        return {"activity": [event.to_dict() for event in store.activity()]}

    # ========================================================================
    # Monitoring
    # ========================================================================

    @app.get("/api/health")
    async def stage_health():
        return {"services": await health.check()}

    @app.get("/api/metrics")
    async def metrics():
        return get_metrics().get_all_metrics()

    return app
