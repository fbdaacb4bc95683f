# ============================================================================
# src/fhir_flow/api/errors.py
# ============================================================================
"""
Shared HTTP plumbing for the stage apps and the gateway.

- FhirFlowError subclasses -> their status code with {"error": message}
- malformed request bodies -> 400 {"error": ...}
- bodies over MAX_REQUEST_BYTES -> 413 before any handler runs
"""

import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ..config import service_settings
from ..utils.exceptions import FhirFlowError

logger = logging.getLogger(__name__)


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


def install_error_handlers(app: FastAPI) -> None:

    @app.exception_handler(FhirFlowError)
    async def handle_pipeline_error(request: Request, exc: FhirFlowError):
        if exc.status_code >= 500:
            logger.error(f"{request.method} {request.url.path} failed: {exc}")
        else:
            logger.info(f"{request.method} {request.url.path} rejected: {exc.message}")
        return error_response(exc.status_code, exc.message)

    @app.exception_handler(RequestValidationError)
    async def handle_bad_request(request: Request, exc: RequestValidationError):
        errors = exc.errors()
        if errors:
            location = ".".join(str(part) for part in errors[0].get("loc", ()) if part != "body")
            message = f"{location}: {errors[0].get('msg')}" if location else str(errors[0].get("msg"))
        else:
            message = "invalid request body"
        return error_response(400, message)


def install_body_limit(app: FastAPI, max_bytes: Optional[int] = None) -> None:
    limit = max_bytes or service_settings.MAX_REQUEST_BYTES

    @app.middleware("http")
    async def reject_large_bodies(request: Request, call_next):
        length = request.headers.get("content-length")
        if length and length.isdigit() and int(length) > limit:
            logger.warning(f"Rejected {request.url.path}: body of {length} bytes exceeds {limit}")
            return error_response(413, "request body too large")
        return await call_next(request)


def configure_app(app: FastAPI) -> FastAPI:
    install_error_handlers(app)
    install_body_limit(app)
    return app
