# ============================================================================
# src/fhir_flow/utils/__init__.py
# ============================================================================
"""
Utility modules for the fhir-flow pipeline.
"""

from .exceptions import (
    FhirFlowError,
    InvalidInput,
    RecognitionError,
    UpstreamFailure,
    NotFound,
    ConfigurationError,
)

from .logging import (
    setup_logging,
    get_logger,
    JsonFormatter,
    log_performance,
)

from .metrics import (
    MetricsCollector,
    Timer,
    get_metrics,
    time_operation,
)

__all__ = [
    # Exceptions
    'FhirFlowError',
    'InvalidInput',
    'RecognitionError',
    'UpstreamFailure',
    'NotFound',
    'ConfigurationError',
    # Logging
    'setup_logging',
    'get_logger',
    'JsonFormatter',
    'log_performance',
    # Metrics
    'MetricsCollector',
    'Timer',
    'get_metrics',
    'time_operation',
]
