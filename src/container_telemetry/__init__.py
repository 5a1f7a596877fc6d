"""Container Telemetry Agent - Core package."""

from __future__ import annotations

from container_telemetry.core.config import AgentSettings, load_config
from container_telemetry.core.schemas import ContainerSummary, DerivedMetrics, StatsSnapshot

__version__ = "0.1.0"

__all__ = [
    "AgentSettings",
    "ContainerSummary",
    "DerivedMetrics",
    "StatsSnapshot",
    "load_config",
    "__version__",
]
