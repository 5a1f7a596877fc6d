"""Core module - configuration and schemas."""

from __future__ import annotations

from container_telemetry.core.config import AgentSettings, load_config
from container_telemetry.core.constants import (
    BYTES_PER_MB,
    DEFAULT_HEALTH_PORT,
    DEFAULT_STATS_INTERVAL,
    HEALTH_OK_BODY,
)
from container_telemetry.core.schemas import (
    BlkioEntry,
    ContainerSummary,
    CPUStats,
    CPUUsage,
    DerivedMetrics,
    LogFormat,
    LogLevel,
    MemoryStats,
    NetworkStats,
    StatsSnapshot,
)

__all__ = [
    "BYTES_PER_MB",
    "DEFAULT_HEALTH_PORT",
    "DEFAULT_STATS_INTERVAL",
    "HEALTH_OK_BODY",
    "AgentSettings",
    "BlkioEntry",
    "ContainerSummary",
    "CPUStats",
    "CPUUsage",
    "DerivedMetrics",
    "load_config",
    "LogFormat",
    "LogLevel",
    "MemoryStats",
    "NetworkStats",
    "StatsSnapshot",
]
