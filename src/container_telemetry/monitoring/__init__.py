"""Monitoring module - Container stats collection.

Provides:
- DockerRuntimeClient: Docker Engine access behind BaseRuntimeClient
- StatsCollector: One collection cycle with per-container fan-out

Shared utilities:
- metrics: Metric derivation from raw stats snapshots
"""

from __future__ import annotations

from container_telemetry.monitoring.collector import StatsCollector, build_record
from container_telemetry.monitoring.metrics import (
    bytes_to_mb,
    calculate_block_io,
    calculate_cpu_percent,
    calculate_memory_percent,
    calculate_network,
    derive_metrics,
)
from container_telemetry.monitoring.runtime_client import (
    BaseRuntimeClient,
    DockerRuntimeClient,
    RuntimeClientError,
)

__all__ = [
    "BaseRuntimeClient",
    "DockerRuntimeClient",
    "RuntimeClientError",
    "StatsCollector",
    "build_record",
    "bytes_to_mb",
    "calculate_block_io",
    "calculate_cpu_percent",
    "calculate_memory_percent",
    "calculate_network",
    "derive_metrics",
]
