"""Shared constants for the telemetry agent.

Centralized defaults so configuration, scheduling and the health server agree.
"""

from __future__ import annotations

# Binary megabyte used for every byte -> MB conversion in emitted records.
BYTES_PER_MB = 1024 * 1024

# Default collection schedule: one cycle per minute after the startup cycle.
DEFAULT_STATS_INTERVAL = "@every 1m"

DEFAULT_HEALTH_HOST = "0.0.0.0"
DEFAULT_HEALTH_PORT = 80

# Body returned by /health when the runtime answers the ping.
HEALTH_OK_BODY = "OK"

# Seconds before a docker API call gives up.
DEFAULT_DOCKER_TIMEOUT = 60
