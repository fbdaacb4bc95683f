# ============================================================================
# src/fhir_flow/utils/metrics.py
# ============================================================================
"""
Performance metrics for pipeline runs.

Counters for pipeline outcomes and per-stage timers. Timer samples are kept
in fixed-size windows so a long-running gateway does not grow without bound.
"""

import statistics
import time
from collections import defaultdict, deque
from typing import Any, Deque, Dict, Optional

TIMER_WINDOW = 500


class MetricsCollector:
    """Collect and aggregate metrics."""

    def __init__(self, window: int = TIMER_WINDOW):
        self._window = window
        self._counters: Dict[str, int] = defaultdict(int)
        self._timers: Dict[str, Deque[float]] = defaultdict(lambda: deque(maxlen=self._window))

    def increment(self, name: str, value: int = 1) -> None:
        self._counters[name] += value

    def record_time(self, name: str, duration: float) -> None:
        self._timers[name].append(duration)

    def get_counter(self, name: str) -> int:
        return self._counters.get(name, 0)

    def get_timer_stats(self, name: str) -> Optional[Dict[str, float]]:
        """
        Get timer statistics.

        Returns:
            Dict with count, min, max, mean, median, p95 (None if no samples)
        """
        values = self._timers.get(name)
        if not values:
            return None

        sorted_values = sorted(values)
        count = len(sorted_values)

        return {
            'count': count,
            'min': sorted_values[0],
            'max': sorted_values[-1],
            'mean': statistics.mean(sorted_values),
            'median': statistics.median(sorted_values),
            'p95': sorted_values[min(int(count * 0.95), count - 1)],
        }

    def get_all_metrics(self) -> Dict[str, Any]:
        return {
            'counters': dict(self._counters),
            'timers': {
                name: self.get_timer_stats(name)
                for name in list(self._timers.keys())
            }
        }

    def reset(self) -> None:
        self._counters.clear()
        self._timers.clear()


class Timer:
    """Context manager for timing operations."""

    def __init__(self, collector: MetricsCollector, operation: str):
        self.collector = collector
        self.operation = operation
        self.start_time: Optional[float] = None
        self.duration: Optional[float] = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration = time.perf_counter() - self.start_time
        self.collector.record_time(self.operation, self.duration)


# Global metrics instance
_global_metrics = MetricsCollector()


def get_metrics() -> MetricsCollector:
    """Get global metrics collector."""
    return _global_metrics


def time_operation(operation: str) -> Timer:
    """Create timer for operation using global metrics."""
    return Timer(_global_metrics, operation)
