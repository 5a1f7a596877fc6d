"""Recurring job scheduler.

Supports two kinds of schedule expressions:
- ``@every <duration>`` with Go-style durations (``30s``, ``1m``, ``1h30m``)
- Cron expressions (``*/5 * * * *``, ``@hourly``, ...); a sixth field is
  seconds and comes first, as in ``0 */5 * * * *``

The scheduler runs its job once at start, then at every trigger time in a
background thread. Each run gets its own thread, so a slow run never delays
the next trigger and runs may overlap.
"""

from __future__ import annotations

import logging
import re
import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from datetime import datetime, timedelta

from croniter import croniter

logger = logging.getLogger(__name__)

EVERY_PREFIX = "@every "

_DURATION_PART = re.compile(r"(\d+(?:\.\d+)?)(ns|us|µs|ms|s|m|h)")

_UNIT_SECONDS = {
    "ns": 1e-9,
    "us": 1e-6,
    "µs": 1e-6,
    "ms": 1e-3,
    "s": 1.0,
    "m": 60.0,
    "h": 3600.0,
}


class ScheduleError(ValueError):
    """Schedule expression could not be parsed."""

    pass


class Schedule(ABC):
    """A recurring trigger."""

    @abstractmethod
    def next_after(self, moment: datetime) -> datetime:
        """Return the first trigger time strictly after ``moment``."""
        pass


class IntervalSchedule(Schedule):
    """Fires at a fixed interval after the previous trigger."""

    def __init__(self, interval: timedelta) -> None:
        if interval <= timedelta(0):
            raise ScheduleError(f"Interval must be positive, got {interval}")
        self.interval = interval

    def next_after(self, moment: datetime) -> datetime:
        return moment + self.interval

    def __repr__(self) -> str:
        return f"IntervalSchedule({self.interval})"


class CronSchedule(Schedule):
    """Fires on a cron expression.

    Six-field expressions carry seconds in the first field.
    """

    def __init__(self, expression: str) -> None:
        if not croniter.is_valid(expression, second_at_beginning=True):
            raise ScheduleError(f"Invalid cron expression: {expression!r}")
        self.expression = expression

    def next_after(self, moment: datetime) -> datetime:
        return croniter(self.expression, moment, second_at_beginning=True).get_next(datetime)

    def __repr__(self) -> str:
        return f"CronSchedule({self.expression!r})"


def parse_duration(text: str) -> timedelta:
    """Parse a Go-style duration such as '1m', '90s' or '1h30m'.

    Raises:
        ScheduleError: If the text is not a valid duration
    """
    text = text.strip()
    if not text:
        raise ScheduleError("Empty duration")

    seconds = 0.0
    position = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != position:
            break
        seconds += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        position = match.end()

    if position != len(text):
        raise ScheduleError(f"Invalid duration: {text!r}")
    return timedelta(seconds=seconds)


def parse_schedule(expression: str) -> Schedule:
    """Parse a schedule expression.

    Args:
        expression: '@every <duration>' or a cron expression

    Returns:
        Schedule instance

    Raises:
        ScheduleError: If the expression is not understood
    """
    expression = expression.strip()
    if expression.startswith(EVERY_PREFIX):
        return IntervalSchedule(parse_duration(expression[len(EVERY_PREFIX) :]))
    return CronSchedule(expression)


class Scheduler:
    """Runs a job immediately and then on every trigger of a schedule.

    Example:
        ```python
        scheduler = Scheduler(collector.run_cycle, parse_schedule("@every 1m"))
        scheduler.start()
        ...
        scheduler.stop()
        ```
    """

    def __init__(self, job: Callable[[], object], schedule: Schedule) -> None:
        self._job = job
        self._schedule = schedule
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Run the job once now and start the background trigger loop."""
        if self.running:
            logger.warning("Scheduler already running")
            return

        self._stop.clear()
        self._dispatch()

        self._thread = threading.Thread(target=self._loop, name="scheduler", daemon=True)
        self._thread.start()
        logger.debug(f"Started scheduler with {self._schedule!r}")

    def stop(self, timeout: float = 2.0) -> None:
        """Stop triggering new runs. Runs already started are not interrupted."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout=timeout)
            self._thread = None

    def _loop(self) -> None:
        next_run = self._schedule.next_after(datetime.now())
        while not self._stop.is_set():
            delay = (next_run - datetime.now()).total_seconds()
            if delay > 0 and self._stop.wait(delay):
                break
            self._dispatch()
            next_run = self._schedule.next_after(datetime.now())

    def _dispatch(self) -> None:
        threading.Thread(target=self._run_job, name="scheduled-run", daemon=True).start()

    def _run_job(self) -> None:
        try:
            self._job()
        except Exception:
            logger.exception("scheduled run failed")
