"""Prometheus metric definitions for Bloom filter operations.

Metrics are registered on the default ``prometheus_client`` registry; the
embedding application decides whether and how to expose them.
"""

from __future__ import annotations

from contextlib import contextmanager
import time
from typing import Generator

from prometheus_client import (
    Counter,
    Histogram,
    CollectorRegistry,
    REGISTRY,
)
import structlog

logger = structlog.get_logger(__name__)

# Default registry (can be overridden for testing)
_registry: CollectorRegistry = REGISTRY


def get_metrics_registry() -> CollectorRegistry:
    """Get the current metrics registry.

    Returns:
        The CollectorRegistry used for all metrics
    """
    return _registry


BLOOMFILTER_OPERATIONS_TOTAL = Counter(
    "bloomfilter_operations_total",
    "Total number of Bloom filter operations",
    labelnames=["operation", "driver", "result"],
    registry=_registry,
)
"""Counter for filter operations.

Labels:
    operation: insert | add | include | clear
    driver: lua | pipeline
    result: present | absent | ok | error
"""

BLOOMFILTER_SCRIPT_RELOADS_TOTAL = Counter(
    "bloomfilter_script_reloads_total",
    "Total number of Lua script reloads after NOSCRIPT replies",
    labelnames=["script"],
    registry=_registry,
)

BLOOMFILTER_OPERATION_LATENCY_SECONDS = Histogram(
    "bloomfilter_operation_latency_seconds",
    "Bloom filter operation latency in seconds",
    labelnames=["operation", "driver"],
    buckets=(0.0005, 0.001, 0.0025, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0),
    registry=_registry,
)


def record_operation(operation: str, driver: str, result: str) -> None:
    BLOOMFILTER_OPERATIONS_TOTAL.labels(
        operation=operation,
        driver=driver,
        result=result,
    ).inc()


def record_script_reload(script: str) -> None:
    BLOOMFILTER_SCRIPT_RELOADS_TOTAL.labels(script=script).inc()


@contextmanager
def track_latency(operation: str, driver: str) -> Generator[None, None, None]:
    """Observe the wall-clock duration of the wrapped block.

    Args:
        operation: Operation label
        driver: Driver label
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        BLOOMFILTER_OPERATION_LATENCY_SECONDS.labels(
            operation=operation,
            driver=driver,
        ).observe(time.perf_counter() - start)
