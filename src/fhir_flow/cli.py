# ============================================================================
# src/fhir_flow/cli.py
# ============================================================================
"""
Service launcher

Usage:
    fhir-flow gateway                 # gateway on GATEWAY_PORT
    fhir-flow ocr                     # one stage, port taken from OCR_URL
    fhir-flow nlp --port 4003 --host 0.0.0.0
"""

import argparse
import logging

import uvicorn

from .api import STAGE_APP_FACTORIES, create_gateway_app, create_stage_app
from .config import logging_settings, service_settings
from .utils.logging import setup_logging

logger = logging.getLogger(__name__)

SERVICES = ["gateway"] + list(STAGE_APP_FACTORIES)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Run a fhir-flow service")
    parser.add_argument("service", choices=SERVICES, help="Service to run")
    parser.add_argument("--host", default="127.0.0.1", help="Bind address")
    parser.add_argument("--port", type=int, help="Listen port (default from settings)")
    parser.add_argument("--log-level", default=None, help="Override LOG_LEVEL")
    return parser


def resolve_port(service: str, port=None) -> int:
    if port:
        return port
    if service == "gateway":
        return service_settings.GATEWAY_PORT
    return service_settings.stage_port(service)


def main(argv=None):
    args = build_parser().parse_args(argv)

    setup_logging(
        level=args.log_level or logging_settings.LOG_LEVEL,
        log_file=logging_settings.LOG_FILE,
        format_json=logging_settings.LOG_JSON,
    )

    if args.service == "gateway":
        app = create_gateway_app()
    else:
        app = create_stage_app(args.service)

    port = resolve_port(args.service, args.port)
    logger.info(f"Starting {args.service} on {args.host}:{port}")
    uvicorn.run(app, host=args.host, port=port, log_config=None)


if __name__ == "__main__":
    main()
