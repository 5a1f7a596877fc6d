"""Pydantic schemas for the container telemetry agent.

This module defines the data contracts flowing through one collection cycle:
container summaries and raw stats snapshots as returned by the Docker Engine
API, and the derived metrics emitted in each log record.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class LogFormat(str, Enum):
    """Supported log output formats."""

    TEXT = "text"
    JSON = "json"


class LogLevel(str, Enum):
    """Supported log levels."""

    DEBUG = "debug"
    INFO = "info"


def _none_to_empty(value: Any, empty: Any) -> Any:
    # Docker reports missing collections as null rather than omitting them
    return empty if value is None else value


class ContainerSummary(BaseModel):
    """One running container as listed by the runtime.

    Attributes:
        id: Full container ID
        names: Container names (Docker prefixes them with '/')
        image: Image reference the container was created from
        image_id: Resolved image digest
        labels: Container labels
        state: Lifecycle state (e.g. 'running')
        status: Human-readable status (e.g. 'Up 5 minutes')
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="Id", min_length=1)
    names: list[str] = Field(default_factory=list, alias="Names")
    image: str = Field(default="", alias="Image")
    image_id: str = Field(default="", alias="ImageID")
    labels: dict[str, str] = Field(default_factory=dict, alias="Labels")
    state: str = Field(default="", alias="State")
    status: str = Field(default="", alias="Status")

    @field_validator("names", mode="before")
    @classmethod
    def default_names(cls, v: Any) -> Any:
        return _none_to_empty(v, [])

    @field_validator("labels", mode="before")
    @classmethod
    def default_labels(cls, v: Any) -> Any:
        return _none_to_empty(v, {})

    @property
    def short_id(self) -> str:
        return self.id[:12]


class CPUUsage(BaseModel):
    """Cumulative CPU time consumed by the container (nanoseconds)."""

    model_config = ConfigDict(extra="ignore")

    total_usage: int = Field(default=0, ge=0)
    percpu_usage: list[int] = Field(default_factory=list)

    @field_validator("percpu_usage", mode="before")
    @classmethod
    def default_percpu(cls, v: Any) -> Any:
        return _none_to_empty(v, [])


class CPUStats(BaseModel):
    """One CPU reading: container usage plus host-wide usage."""

    model_config = ConfigDict(extra="ignore")

    cpu_usage: CPUUsage = Field(default_factory=CPUUsage)
    system_cpu_usage: int = Field(default=0, ge=0)
    online_cpus: int = Field(default=0, ge=0)


class MemoryStats(BaseModel):
    """Current memory usage and the container's limit (bytes)."""

    model_config = ConfigDict(extra="ignore")

    usage: int = Field(default=0, ge=0)
    limit: int = Field(default=0, ge=0)


class NetworkStats(BaseModel):
    """Cumulative byte counters for one network interface."""

    model_config = ConfigDict(extra="ignore")

    rx_bytes: int = Field(default=0, ge=0)
    tx_bytes: int = Field(default=0, ge=0)


class BlkioEntry(BaseModel):
    """One io_service_bytes_recursive entry (per device and operation)."""

    model_config = ConfigDict(extra="ignore")

    major: int = 0
    minor: int = 0
    op: str = ""
    value: int = Field(default=0, ge=0)


class BlkioStats(BaseModel):
    """Block I/O section of a stats payload."""

    model_config = ConfigDict(extra="ignore")

    io_service_bytes_recursive: list[BlkioEntry] = Field(default_factory=list)

    @field_validator("io_service_bytes_recursive", mode="before")
    @classmethod
    def default_entries(cls, v: Any) -> Any:
        return _none_to_empty(v, [])


class PidsStats(BaseModel):
    """Process count section of a stats payload."""

    model_config = ConfigDict(extra="ignore")

    current: int = Field(default=0, ge=0)

    @field_validator("current", mode="before")
    @classmethod
    def default_current(cls, v: Any) -> Any:
        return _none_to_empty(v, 0)


class StatsSnapshot(BaseModel):
    """A single stats read for one container, paired with the previous CPU read.

    Mirrors the JSON body of ``GET /containers/{id}/stats?stream=false``.
    The snapshot is consumed once by the metric derivation and then discarded.
    """

    model_config = ConfigDict(extra="ignore")

    cpu_stats: CPUStats = Field(default_factory=CPUStats)
    precpu_stats: CPUStats = Field(default_factory=CPUStats)
    memory_stats: MemoryStats = Field(default_factory=MemoryStats)
    networks: dict[str, NetworkStats] = Field(default_factory=dict)
    blkio_stats: BlkioStats = Field(default_factory=BlkioStats)
    pids_stats: PidsStats = Field(default_factory=PidsStats)
    os_type: str = ""

    @field_validator(
        "cpu_stats", "precpu_stats", "memory_stats", "blkio_stats", "pids_stats", mode="before"
    )
    @classmethod
    def default_sections(cls, v: Any) -> Any:
        return _none_to_empty(v, {})

    @field_validator("networks", mode="before")
    @classmethod
    def default_networks(cls, v: Any) -> Any:
        return _none_to_empty(v, {})

    @property
    def blkio_entries(self) -> list[BlkioEntry]:
        return self.blkio_stats.io_service_bytes_recursive

    @property
    def pids(self) -> int:
        return self.pids_stats.current

    @classmethod
    def from_docker(cls, payload: Any, os_type: str = "") -> StatsSnapshot:
        """Build a snapshot from a raw Docker stats payload.

        Args:
            payload: Decoded stats JSON
            os_type: Operating system the runtime reports for its containers

        Returns:
            Validated StatsSnapshot

        Raises:
            pydantic.ValidationError: If the payload cannot be decoded
        """
        snapshot = cls.model_validate(payload)
        if os_type:
            snapshot.os_type = os_type
        return snapshot


class DerivedMetrics(BaseModel):
    """Point-in-time metrics derived from one StatsSnapshot."""

    model_config = ConfigDict(frozen=True)

    cpu_percent: float = Field(default=0.0, ge=0)
    memory_mb: float = Field(default=0.0, ge=0)
    memory_percent: float = Field(default=0.0, ge=0)
    net_read_mb: float = Field(default=0.0, ge=0)
    net_write_mb: float = Field(default=0.0, ge=0)
    blk_read_mb: float = Field(default=0.0, ge=0)
    blk_write_mb: float = Field(default=0.0, ge=0)
    pids: int = Field(default=0, ge=0)

    def to_log_fields(self) -> dict[str, str | int]:
        """Render the metrics for a log record.

        Floats become strings with two decimals; the process count stays an int.
        """
        return {
            "cpu_pct": f"{self.cpu_percent:.2f}",
            "mem_mb": f"{self.memory_mb:.2f}",
            "mem_pct": f"{self.memory_percent:.2f}",
            "net_read_mb": f"{self.net_read_mb:.2f}",
            "net_write_mb": f"{self.net_write_mb:.2f}",
            "blk_read_mb": f"{self.blk_read_mb:.2f}",
            "blk_write_mb": f"{self.blk_write_mb:.2f}",
            "pids": self.pids,
        }
