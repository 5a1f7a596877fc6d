"""Liveness endpoint proving the agent can reach the container runtime."""

from __future__ import annotations

import contextlib
import logging
import signal
import threading
from collections.abc import Iterator

import uvicorn
from fastapi import FastAPI
from fastapi.responses import PlainTextResponse
from uvicorn.server import HANDLED_SIGNALS

from container_telemetry.core.constants import HEALTH_OK_BODY
from container_telemetry.monitoring.runtime_client import BaseRuntimeClient, RuntimeClientError

logger = logging.getLogger(__name__)


def create_app(client: BaseRuntimeClient) -> FastAPI:
    """Build the health application around a runtime client.

    Args:
        client: Runtime client whose ping() backs the health check

    Returns:
        FastAPI application exposing GET /health
    """
    app = FastAPI(title="container-telemetry", docs_url=None, redoc_url=None, openapi_url=None)

    # Sync handler: FastAPI runs it in its thread pool, so checks never block each other
    @app.get("/health", response_class=PlainTextResponse)
    def health() -> PlainTextResponse:
        try:
            client.ping()
        except RuntimeClientError as e:
            logger.debug(f"Health check failed: {e}")
            return PlainTextResponse(str(e), status_code=500)
        return PlainTextResponse(HEALTH_OK_BODY)

    return app


class AgentServer(uvicorn.Server):
    """Uvicorn server that treats SIGINT/SIGTERM as a request to return.

    Stock uvicorn re-raises the captured signal once it has shut down, which
    kills the process before the agent can stop its scheduler.
    """

    @contextlib.contextmanager
    def capture_signals(self) -> Iterator[None]:
        # Signal handlers can only be installed from the main thread
        if threading.current_thread() is not threading.main_thread():
            yield
            return

        original_handlers = {sig: signal.signal(sig, self.handle_exit) for sig in HANDLED_SIGNALS}
        try:
            yield
        finally:
            for sig, handler in original_handlers.items():
                signal.signal(sig, handler)


def serve(app: FastAPI, host: str, port: int) -> None:
    """Serve the application until the process is asked to stop.

    SIGINT or SIGTERM shuts the server down and this function returns
    normally. The agent's logging configuration is left untouched.
    """
    config = uvicorn.Config(app, host=host, port=port, log_config=None, access_log=False)
    server = AgentServer(config)
    server.run()
