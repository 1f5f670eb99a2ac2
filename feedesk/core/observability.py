"""
Error capture and metrics used by the balance engine.

The engine takes an Observability instance in its constructor so it can be exercised in tests
without any process-wide monitoring state.
"""

import logging
from typing import Dict, List, Optional, Tuple

logger = logging.getLogger(__name__)


class Observability:
    """Capability interface: capture_error and record_metric."""

    def capture_error(self, error: Exception, context: Optional[Dict] = None) -> None:
        raise NotImplementedError

    def record_metric(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        raise NotImplementedError


class LoggingObservability(Observability):
    """Default implementation: errors and metrics go to the application log."""

    def capture_error(self, error: Exception, context: Optional[Dict] = None) -> None:
        logger.error("Captured error: %s context=%s", error, context or {}, exc_info=error)

    def record_metric(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        logger.debug("metric %s=%s tags=%s", name, value, tags or {})


class NullObservability(Observability):
    """Keeps everything in memory. Used by tests to assert on captured errors and metrics."""

    def __init__(self) -> None:
        self.errors: List[Tuple[Exception, Dict]] = []
        self.metrics: List[Tuple[str, float, Dict[str, str]]] = []

    def capture_error(self, error: Exception, context: Optional[Dict] = None) -> None:
        self.errors.append((error, context or {}))

    def record_metric(self, name: str, value: float, tags: Optional[Dict[str, str]] = None) -> None:
        self.metrics.append((name, value, tags or {}))


_default = LoggingObservability()


def get_observability() -> Observability:
    """FastAPI dependency; override in tests via app.dependency_overrides."""
    return _default
