"""Tests for schedule parsing and the Scheduler."""

import threading
import time
from datetime import datetime, timedelta

import pytest
from conftest import StubRuntimeClient, make_container, make_stats_payload

from container_telemetry.monitoring.collector import StatsCollector
from container_telemetry.monitoring.runtime_client import RuntimeClientError
from container_telemetry.scheduling.scheduler import (
    CronSchedule,
    IntervalSchedule,
    ScheduleError,
    Scheduler,
    parse_duration,
    parse_schedule,
)


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.01)
    return predicate()


class TestParseDuration:
    """Tests for Go-style duration parsing."""

    @pytest.mark.parametrize(
        ("text", "expected"),
        [
            ("1m", timedelta(minutes=1)),
            ("30s", timedelta(seconds=30)),
            ("1h30m", timedelta(hours=1, minutes=30)),
            ("1.5h", timedelta(minutes=90)),
            ("500ms", timedelta(milliseconds=500)),
            (" 2m ", timedelta(minutes=2)),
        ],
    )
    def test_valid(self, text, expected):
        assert parse_duration(text) == expected

    @pytest.mark.parametrize("text", ["", "1", "m", "1d", "1m x", "abc", "-1m"])
    def test_invalid(self, text):
        with pytest.raises(ScheduleError):
            parse_duration(text)


class TestParseSchedule:
    """Tests for parse_schedule."""

    def test_every(self):
        schedule = parse_schedule("@every 1m")
        assert isinstance(schedule, IntervalSchedule)
        start = datetime(2024, 1, 1, 12, 0, 0)
        assert schedule.next_after(start) == datetime(2024, 1, 1, 12, 1, 0)

    def test_cron(self):
        schedule = parse_schedule("*/5 * * * *")
        assert isinstance(schedule, CronSchedule)
        assert schedule.next_after(datetime(2024, 1, 1, 12, 2, 0)) == datetime(2024, 1, 1, 12, 5)

    def test_cron_with_seconds(self):
        """A sixth field is seconds and comes first."""
        schedule = parse_schedule("0 */5 * * * *")
        first = schedule.next_after(datetime(2024, 1, 1, 0, 1))
        second = schedule.next_after(first)

        assert first == datetime(2024, 1, 1, 0, 5)
        assert (second - first).total_seconds() == 300

    def test_cron_seconds_field(self):
        schedule = parse_schedule("30 * * * * *")
        start = datetime(2024, 1, 1, 12, 0, 0)
        assert schedule.next_after(start) == datetime(2024, 1, 1, 12, 0, 30)

    def test_descriptor(self):
        schedule = parse_schedule("@hourly")
        assert schedule.next_after(datetime(2024, 1, 1, 12, 30)) == datetime(2024, 1, 1, 13, 0)

    @pytest.mark.parametrize("expression", ["@every", "@every 0s", "@every soon", "not cron", ""])
    def test_invalid(self, expression):
        """Unparseable schedules are rejected up front."""
        with pytest.raises(ScheduleError):
            parse_schedule(expression)

    @pytest.mark.parametrize("expression", ["@everyday", "@every1m"])
    def test_every_needs_separator(self, expression):
        """Only '@every ' followed by a duration is an interval schedule."""
        with pytest.raises(ScheduleError, match="Invalid cron expression"):
            parse_schedule(expression)

    def test_schedule_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_schedule("61 * * * *")


class TestScheduler:
    """Tests for Scheduler."""

    def test_runs_immediately(self):
        """The first run happens at start, not after the first interval."""
        ran = threading.Event()
        scheduler = Scheduler(ran.set, IntervalSchedule(timedelta(hours=1)))
        scheduler.start()
        try:
            assert ran.wait(timeout=2)
        finally:
            scheduler.stop()

    def test_recurring(self):
        runs = []
        scheduler = Scheduler(lambda: runs.append(1), IntervalSchedule(timedelta(milliseconds=20)))
        scheduler.start()
        try:
            assert wait_for(lambda: len(runs) >= 3)
        finally:
            scheduler.stop()
        assert not scheduler.running

    def test_stop_halts_triggers(self):
        runs = []
        scheduler = Scheduler(lambda: runs.append(1), IntervalSchedule(timedelta(milliseconds=20)))
        scheduler.start()
        assert wait_for(lambda: len(runs) >= 2)
        scheduler.stop()

        time.sleep(0.05)
        count = len(runs)
        time.sleep(0.1)
        assert len(runs) == count

    def test_overlapping_runs(self):
        """A run that outlasts the interval does not block the next trigger."""
        release = threading.Event()
        started = []
        lock = threading.Lock()

        def slow_job():
            with lock:
                started.append(1)
            release.wait(timeout=5)

        scheduler = Scheduler(slow_job, IntervalSchedule(timedelta(milliseconds=20)))
        scheduler.start()
        try:
            assert wait_for(lambda: len(started) >= 3)
        finally:
            release.set()
            scheduler.stop()

    def test_failing_job_keeps_schedule(self):
        """Exceptions from a run are logged and later runs still happen."""
        runs = []

        def failing_job():
            runs.append(1)
            raise RuntimeError("boom")

        scheduler = Scheduler(failing_job, IntervalSchedule(timedelta(milliseconds=20)))
        scheduler.start()
        try:
            assert wait_for(lambda: len(runs) >= 3)
        finally:
            scheduler.stop()

    def test_list_failure_does_not_stop_cycles(self):
        """Scheduled cycles keep running after the container listing fails."""
        container = make_container("9" * 64)
        client = StubRuntimeClient(
            containers=[container],
            stats={container.id: make_stats_payload()},
            list_error=RuntimeClientError("daemon restarting"),
        )
        scheduler = Scheduler(
            StatsCollector(client).run_cycle, IntervalSchedule(timedelta(milliseconds=20))
        )
        scheduler.start()
        try:
            assert wait_for(lambda: client.list_calls >= 2)
            client.list_error = None
            calls = client.list_calls
            assert wait_for(lambda: client.list_calls > calls + 1)
        finally:
            scheduler.stop()
