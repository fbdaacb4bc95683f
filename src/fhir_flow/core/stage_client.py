# ============================================================================
# src/fhir_flow/core/stage_client.py
# ============================================================================
"""
HTTP client for calls from the gateway to the stage services.

- JSON POST with a per-call timeout
- non-2xx responses become UpstreamFailure carrying the stage's status and
  its {"error": ...} message
- 2xx bodies that are not a JSON object become UpstreamFailure with status 502
- timeouts and connection failures become UpstreamFailure with status 504
"""

import asyncio
import json
import logging
from typing import Any, Dict, Optional

import aiohttp

from ..config import service_settings
from ..utils.exceptions import UpstreamFailure

logger = logging.getLogger(__name__)

BAD_GATEWAY = 502
GATEWAY_TIMEOUT = 504


def error_message(status: int, body: str) -> str:
    """Pull the "error" field out of a stage error body, else the raw text."""
    try:
        data = json.loads(body)
    except ValueError:
        data = None

    if isinstance(data, dict) and data.get("error"):
        return str(data["error"])
    return body.strip() or f"HTTP {status}"


def parse_stage_body(stage: str, body: str) -> Dict[str, Any]:
    """
    JSON object from a successful stage response; an empty body reads as {}.

    Raises:
        UpstreamFailure: 502 when the body is not a JSON object
    """
    if not body:
        return {}
    try:
        data = json.loads(body)
    except ValueError:
        raise UpstreamFailure(stage, BAD_GATEWAY, f"{stage} stage returned invalid JSON")
    if not isinstance(data, dict):
        raise UpstreamFailure(stage, BAD_GATEWAY, f"{stage} stage returned a non-object body")
    return data


class StageClient:
    """
    aiohttp-backed transport for the pipeline orchestrator and health probes.
    """

    def __init__(self, default_timeout: Optional[float] = None):
        self.default_timeout = default_timeout or service_settings.STAGE_TIMEOUT_SECONDS
        self.logger = logging.getLogger(__name__)

        # Created lazily, tied to event loop
        self._session: Optional[aiohttp.ClientSession] = None
        self._session_loop: Optional[asyncio.AbstractEventLoop] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        current_loop = asyncio.get_running_loop()

        needs_new_session = (
            self._session is None
            or self._session.closed
            or self._session_loop is not current_loop
        )

        if needs_new_session:
            if self._session is not None and not self._session.closed:
                await self._session.close()
            self._session = aiohttp.ClientSession()
            self._session_loop = current_loop

        return self._session

    async def close(self):
        """Close HTTP session."""
        if self._session and not self._session.closed:
            await self._session.close()
        self._session = None
        self._session_loop = None

    async def post_json(
        self,
        stage: str,
        url: str,
        payload: Dict[str, Any],
        timeout: Optional[float] = None,
    ) -> Dict[str, Any]:
        """
        POST a JSON payload to a stage and return its JSON body.

        Raises:
            UpstreamFailure: non-2xx status, timeout or unreachable stage
        """
        session = await self._get_session()
        client_timeout = aiohttp.ClientTimeout(total=timeout or self.default_timeout)

        try:
            async with session.post(url, json=payload, timeout=client_timeout) as response:
                body = await response.text()
                if response.status >= 400:
                    raise UpstreamFailure(stage, response.status, error_message(response.status, body))
                return parse_stage_body(stage, body)

        except asyncio.TimeoutError:
            self.logger.warning(f"Stage '{stage}' timed out after {client_timeout.total}s")
            raise UpstreamFailure(stage, GATEWAY_TIMEOUT, f"{stage} stage timed out")
        except aiohttp.ClientError as e:
            self.logger.warning(f"Stage '{stage}' unreachable at {url}: {e}")
            raise UpstreamFailure(stage, GATEWAY_TIMEOUT, f"{stage} stage unreachable: {e}")

    async def get_status(self, url: str, timeout: Optional[float] = None) -> int:
        """HTTP status of a GET; network errors propagate."""
        session = await self._get_session()
        client_timeout = aiohttp.ClientTimeout(total=timeout or self.default_timeout)

        async with session.get(url, timeout=client_timeout) as response:
            return response.status
