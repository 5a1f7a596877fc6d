"""Server module - HTTP liveness endpoint."""

from __future__ import annotations

from container_telemetry.server.health import create_app, serve

__all__ = ["create_app", "serve"]
