"""Container runtime clients.

BaseRuntimeClient is the interface the collector and the health endpoint
depend on; DockerRuntimeClient implements it on top of the Docker SDK.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import docker
import requests
from docker.errors import DockerException

from container_telemetry.core.constants import DEFAULT_DOCKER_TIMEOUT
from container_telemetry.core.schemas import ContainerSummary, StatsSnapshot

logger = logging.getLogger(__name__)


class RuntimeClientError(Exception):
    """The container runtime could not be reached or rejected a request."""

    pass


class BaseRuntimeClient(ABC):
    """Abstract base class for container runtime clients.

    Implementations must be safe to call concurrently from many threads
    without external locking: one instance is shared by every collection
    unit and by the health endpoint.
    """

    @abstractmethod
    def list_containers(self) -> list[ContainerSummary]:
        """List currently running containers.

        Raises:
            RuntimeClientError: If the runtime cannot be queried
        """
        pass

    @abstractmethod
    def fetch_stats(self, container_id: str) -> StatsSnapshot:
        """Fetch one stats snapshot for a container.

        Args:
            container_id: Container ID (short or full)

        Raises:
            RuntimeClientError: If the runtime cannot be queried
            pydantic.ValidationError: If the stats payload cannot be decoded
        """
        pass

    @abstractmethod
    def ping(self) -> None:
        """Check connectivity to the runtime.

        Raises:
            RuntimeClientError: If the runtime does not answer
        """
        pass

    def close(self) -> None:
        """Release connections held by the client."""
        pass


class DockerRuntimeClient(BaseRuntimeClient):
    """BaseRuntimeClient implementation using the Docker Engine API.

    Thread safety: the wrapped DockerClient sends every request through a
    pooled requests.Session and this class only issues read-only calls, so a
    single instance is shared across threads.

    Example:
        ```python
        client = DockerRuntimeClient.from_env()
        for container in client.list_containers():
            snapshot = client.fetch_stats(container.id)
        ```
    """

    def __init__(self, client: docker.DockerClient, os_type: str = "") -> None:
        """Wrap an existing Docker client.

        Args:
            client: Connected docker.DockerClient
            os_type: Operating system reported by the daemon ('linux', 'windows')
        """
        self._client = client
        self._os_type = os_type

    @classmethod
    def from_env(
        cls,
        base_url: str | None = None,
        timeout: int = DEFAULT_DOCKER_TIMEOUT,
    ) -> DockerRuntimeClient:
        """Connect to the Docker daemon.

        Args:
            base_url: Daemon URL; DOCKER_HOST and friends apply when None
            timeout: Seconds before an API call gives up

        Raises:
            RuntimeClientError: If the daemon cannot be reached
        """
        try:
            if base_url:
                client = docker.DockerClient(base_url=base_url, timeout=timeout)
            else:
                client = docker.from_env(timeout=timeout)
            version = client.version()
        except (DockerException, requests.RequestException) as e:
            raise RuntimeClientError(f"Could not connect to Docker: {e}") from e

        os_type = version.get("Os", "")
        logger.debug(
            f"Connected to Docker {version.get('Version', '?')} "
            f"(API {version.get('ApiVersion', '?')}, {os_type or 'unknown OS'})"
        )
        return cls(client, os_type=os_type)

    @property
    def os_type(self) -> str:
        return self._os_type

    def list_containers(self) -> list[ContainerSummary]:
        try:
            raw: list[dict[str, Any]] = self._client.api.containers()
        except (DockerException, requests.RequestException) as e:
            raise RuntimeClientError(str(e)) from e

        return [ContainerSummary.model_validate(item) for item in raw]

    def fetch_stats(self, container_id: str) -> StatsSnapshot:
        try:
            payload = self._client.api.stats(container_id, stream=False)
        except (DockerException, requests.RequestException) as e:
            raise RuntimeClientError(str(e)) from e

        return StatsSnapshot.from_docker(payload, os_type=self._os_type)

    def ping(self) -> None:
        try:
            self._client.ping()
        except (DockerException, requests.RequestException) as e:
            raise RuntimeClientError(str(e)) from e

    def close(self) -> None:
        self._client.close()
