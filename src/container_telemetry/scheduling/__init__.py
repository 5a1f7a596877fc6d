"""Scheduling module - Recurring collection triggers."""

from __future__ import annotations

from container_telemetry.scheduling.scheduler import (
    CronSchedule,
    IntervalSchedule,
    Schedule,
    ScheduleError,
    Scheduler,
    parse_duration,
    parse_schedule,
)

__all__ = [
    "CronSchedule",
    "IntervalSchedule",
    "Schedule",
    "ScheduleError",
    "Scheduler",
    "parse_duration",
    "parse_schedule",
]
