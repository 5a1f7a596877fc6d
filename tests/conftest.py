"""Shared fixtures for container telemetry tests."""

from __future__ import annotations

import threading
from typing import Any

import pytest

from container_telemetry.core.schemas import ContainerSummary, StatsSnapshot
from container_telemetry.monitoring.runtime_client import BaseRuntimeClient, RuntimeClientError


def make_stats_payload(
    total_usage: int = 200,
    pre_total_usage: int = 100,
    system_usage: int = 2000,
    pre_system_usage: int = 1000,
    online_cpus: int = 4,
    percpu_usage: list[int] | None = None,
    memory_usage: int = 100 * 1024 * 1024,  # 100 MB
    memory_limit: int = 1024 * 1024 * 1024,  # 1 GB
    networks: dict[str, dict[str, int]] | None = None,
    blkio: list[dict[str, Any]] | None = None,
    pids: int = 5,
) -> dict[str, Any]:
    """Create a Docker stats response."""
    return {
        "read": "2024-01-01T00:00:01Z",
        "preread": "2024-01-01T00:00:00Z",
        "cpu_stats": {
            "cpu_usage": {"total_usage": total_usage, "percpu_usage": percpu_usage},
            "system_cpu_usage": system_usage,
            "online_cpus": online_cpus,
        },
        "precpu_stats": {
            "cpu_usage": {"total_usage": pre_total_usage},
            "system_cpu_usage": pre_system_usage,
        },
        "memory_stats": {"usage": memory_usage, "limit": memory_limit},
        "networks": networks
        if networks is not None
        else {"eth0": {"rx_bytes": 1024 * 1024, "tx_bytes": 2 * 1024 * 1024}},
        "blkio_stats": {
            "io_service_bytes_recursive": blkio
            if blkio is not None
            else [
                {"major": 8, "minor": 0, "op": "Read", "value": 3 * 1024 * 1024},
                {"major": 8, "minor": 0, "op": "Write", "value": 4 * 1024 * 1024},
            ]
        },
        "pids_stats": {"current": pids},
    }


def make_container(container_id: str = "a" * 64, **overrides: Any) -> ContainerSummary:
    """Create a ContainerSummary as listed by Docker."""
    data: dict[str, Any] = {
        "Id": container_id,
        "Names": [f"/app-{container_id[:4]}"],
        "Image": "nginx:latest",
        "ImageID": "sha256:" + "b" * 64,
        "Labels": {"com.example.team": "web"},
        "State": "running",
        "Status": "Up 5 minutes",
    }
    data.update(overrides)
    return ContainerSummary.model_validate(data)


class StubRuntimeClient(BaseRuntimeClient):
    """In-memory runtime client.

    ``stats`` maps container IDs to a payload dict or to an exception to raise.
    """

    def __init__(
        self,
        containers: list[ContainerSummary] | None = None,
        stats: dict[str, Any] | None = None,
        list_error: Exception | None = None,
        ping_error: Exception | None = None,
        os_type: str = "linux",
    ) -> None:
        self.containers = containers or []
        self.stats = stats or {}
        self.list_error = list_error
        self.ping_error = ping_error
        self.os_type = os_type
        self.list_calls = 0
        self.ping_calls = 0
        self.closed = False
        self._lock = threading.Lock()

    def list_containers(self) -> list[ContainerSummary]:
        with self._lock:
            self.list_calls += 1
        if self.list_error is not None:
            raise self.list_error
        return list(self.containers)

    def fetch_stats(self, container_id: str) -> StatsSnapshot:
        result = self.stats.get(container_id)
        if result is None:
            raise RuntimeClientError(f"No such container: {container_id}")
        if isinstance(result, Exception):
            raise result
        return StatsSnapshot.from_docker(result, os_type=self.os_type)

    def ping(self) -> None:
        with self._lock:
            self.ping_calls += 1
        if self.ping_error is not None:
            raise self.ping_error

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def stats_payload() -> dict[str, Any]:
    return make_stats_payload()


@pytest.fixture
def snapshot(stats_payload: dict[str, Any]) -> StatsSnapshot:
    return StatsSnapshot.from_docker(stats_payload, os_type="linux")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Remove agent settings from the environment."""
    for name in (
        "STATS_INTERVAL",
        "LOG_FORMAT",
        "LOG_LEVEL",
        "HEALTH_HOST",
        "HEALTH_PORT",
        "DOCKER_BASE_URL",
        "DOCKER_TIMEOUT",
        "LOG_FILE",
    ):
        monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv(name.lower(), raising=False)
