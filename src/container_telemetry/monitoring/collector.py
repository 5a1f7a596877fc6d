"""Collection cycle: list containers, fetch stats, derive and emit metrics.

Each cycle lists the running containers and starts one background thread per
container. A thread fetches that container's stats, derives the metrics and
emits a single structured log record. Failures are logged and only end the
unit of work they happen in.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from pydantic import ValidationError

from container_telemetry.core.schemas import ContainerSummary, DerivedMetrics, StatsSnapshot
from container_telemetry.monitoring.metrics import derive_metrics
from container_telemetry.monitoring.runtime_client import BaseRuntimeClient, RuntimeClientError

logger = logging.getLogger(__name__)


def build_record(
    container: ContainerSummary, snapshot: StatsSnapshot, metrics: DerivedMetrics
) -> dict[str, Any]:
    """Assemble the structured fields of one stats record."""
    return {
        "id": container.short_id,
        "names": container.names,
        "image": container.image,
        "image_id": container.image_id,
        "labels": container.labels,
        "state": container.state,
        "status": container.status,
        "os": snapshot.os_type,
        "stats": metrics.to_log_fields(),
    }


class StatsCollector:
    """Runs collection cycles against a runtime client.

    The collector holds no per-cycle state, so overlapping cycles are safe.

    Example:
        ```python
        collector = StatsCollector(DockerRuntimeClient.from_env())
        for worker in collector.run_cycle():
            worker.join()
        ```
    """

    def __init__(self, client: BaseRuntimeClient) -> None:
        """Initialize the collector.

        Args:
            client: Runtime client shared by every collection unit
        """
        self._client = client

    def run_cycle(self) -> list[threading.Thread]:
        """Run one collection pass over all running containers.

        Returns:
            The started per-container threads, for callers that want to join them
        """
        try:
            containers = self._client.list_containers()
        except (RuntimeClientError, ValidationError) as e:
            logger.error("error getting container list", extra={"fields": {"error": str(e)}})
            containers = []

        logger.debug(f"Collecting stats for {len(containers)} containers")

        workers = []
        for container in containers:
            worker = threading.Thread(
                target=self.collect_container,
                args=(container,),
                name=f"stats-{container.short_id}",
                daemon=True,
            )
            worker.start()
            workers.append(worker)
        return workers

    def collect_container(self, container: ContainerSummary) -> None:
        """Fetch, derive and emit the stats record for one container."""
        try:
            snapshot = self._client.fetch_stats(container.id)
        except RuntimeClientError as e:
            logger.error(
                "error getting container stats",
                extra={"fields": {"id": container.short_id, "error": str(e)}},
            )
            return
        except ValidationError as e:
            logger.error(
                "error decoding stats",
                extra={"fields": {"id": container.short_id, "error": str(e)}},
            )
            return

        metrics = derive_metrics(snapshot)
        logger.info("stats", extra={"fields": build_record(container, snapshot, metrics)})
