"""Utils module - Shared utilities."""

from __future__ import annotations

from container_telemetry.utils.logging import JsonFormatter, TextFormatter, setup_logging

__all__ = ["JsonFormatter", "TextFormatter", "setup_logging"]
