"""Agent bootstrap: wires configuration, runtime client, scheduler and server."""

from __future__ import annotations

import logging
from collections.abc import Callable

from fastapi import FastAPI

from container_telemetry.core.config import AgentSettings
from container_telemetry.monitoring.collector import StatsCollector
from container_telemetry.monitoring.runtime_client import (
    BaseRuntimeClient,
    DockerRuntimeClient,
    RuntimeClientError,
)
from container_telemetry.scheduling.scheduler import (
    Schedule,
    ScheduleError,
    Scheduler,
    parse_schedule,
)
from container_telemetry.server.health import create_app, serve

logger = logging.getLogger(__name__)


class AgentStartupError(Exception):
    """The agent cannot start (bad schedule or unreachable runtime)."""

    pass


class TelemetryAgent:
    """Periodic container telemetry agent.

    Runs a collection cycle at startup and then on the configured schedule,
    while serving GET /health until the process is stopped.

    Example:
        ```python
        agent = TelemetryAgent(load_config())
        agent.run()
        ```
    """

    def __init__(
        self,
        settings: AgentSettings,
        client_factory: Callable[[], BaseRuntimeClient] | None = None,
        serve_app: Callable[[FastAPI, str, int], None] = serve,
    ) -> None:
        """Initialize the agent.

        Args:
            settings: Agent configuration
            client_factory: Builds the runtime client; connects to Docker by default
            serve_app: Runs the health application until shutdown
        """
        self.settings = settings
        self._client_factory = client_factory or self._docker_client
        self._serve_app = serve_app

    def _docker_client(self) -> BaseRuntimeClient:
        return DockerRuntimeClient.from_env(
            base_url=self.settings.docker_base_url,
            timeout=self.settings.docker_timeout,
        )

    def parse_schedule(self) -> Schedule:
        try:
            return parse_schedule(self.settings.stats_interval)
        except ScheduleError as e:
            logger.error("invalid stats interval", extra={"fields": {"error": str(e)}})
            raise AgentStartupError(str(e)) from e

    def connect(self) -> BaseRuntimeClient:
        try:
            return self._client_factory()
        except RuntimeClientError as e:
            logger.error("error connecting to runtime", extra={"fields": {"error": str(e)}})
            raise AgentStartupError(str(e)) from e

    def run(self) -> None:
        """Run until the health server shuts down.

        Raises:
            AgentStartupError: If the schedule is invalid or the runtime unreachable
        """
        logger.info(
            "starting up...", extra={"fields": {"environment": self.settings.environment()}}
        )

        schedule = self.parse_schedule()
        client = self.connect()

        scheduler = Scheduler(StatsCollector(client).run_cycle, schedule)
        app = create_app(client)

        try:
            scheduler.start()
            self._serve_app(app, self.settings.health_host, self.settings.health_port)
        except Exception as e:
            logger.error("shutting down", extra={"fields": {"error": str(e)}})
            raise
        else:
            logger.info("shutting down")
        finally:
            scheduler.stop()
            client.close()

    def collect_once(self) -> None:
        """Run a single collection cycle and wait for every container."""
        client = self.connect()
        try:
            for worker in StatsCollector(client).run_cycle():
                worker.join()
        finally:
            client.close()
