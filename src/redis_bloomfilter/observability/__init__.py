"""Observability module for the Redis Bloom filter.

Provides Prometheus counters and a latency histogram for filter operations
and Lua script reloads.
"""

from .metrics import (
    BLOOMFILTER_OPERATION_LATENCY_SECONDS,
    BLOOMFILTER_OPERATIONS_TOTAL,
    BLOOMFILTER_SCRIPT_RELOADS_TOTAL,
    get_metrics_registry,
    record_operation,
    record_script_reload,
    track_latency,
)

__all__ = [
    "BLOOMFILTER_OPERATION_LATENCY_SECONDS",
    "BLOOMFILTER_OPERATIONS_TOTAL",
    "BLOOMFILTER_SCRIPT_RELOADS_TOTAL",
    "get_metrics_registry",
    "record_operation",
    "record_script_reload",
    "track_latency",
]
