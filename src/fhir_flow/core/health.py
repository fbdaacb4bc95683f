# ============================================================================
# src/fhir_flow/core/health.py
# ============================================================================
"""
Health Aggregator

Probes every stage's /health endpoint concurrently. A probe that raises or
times out is reported as {"name": <stage>, "ok": False}; one bad stage never
hides the others.
"""

import asyncio
import logging
from typing import Any, Dict, List, Mapping, Optional

from ..config import service_settings

logger = logging.getLogger(__name__)


class HealthAggregator:

    def __init__(
        self,
        transport,
        stage_urls: Optional[Mapping[str, str]] = None,
        timeout: Optional[float] = None,
    ):
        self.transport = transport
        self.stage_urls = dict(stage_urls or service_settings.stage_urls())
        self.timeout = timeout or service_settings.HEALTH_TIMEOUT_SECONDS

    async def _probe(self, name: str, url: str) -> Dict[str, Any]:
        status = await asyncio.wait_for(
            self.transport.get_status(f"{url}/health", timeout=self.timeout),
            timeout=self.timeout,
        )
        return {"name": name, "ok": 200 <= status < 300}

    async def check(self) -> List[Dict[str, Any]]:
        """One {name, ok} entry per stage, in configured order."""
        names = list(self.stage_urls)
        results = await asyncio.gather(
            *(self._probe(name, self.stage_urls[name]) for name in names),
            return_exceptions=True,
        )

        services = []
        for name, result in zip(names, results):
            if isinstance(result, BaseException):
                logger.warning(f"Health probe for '{name}' failed: {result!r}")
                services.append({"name": name, "ok": False})
            else:
                services.append(result)
        return services
