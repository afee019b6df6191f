#!/usr/bin/env python3
"""
Tests for the daily schedule and run loop.
"""

import threading
import unittest
from datetime import datetime, timedelta, timezone

from core.config_loader import ScheduleConfig
from core.errors import ConfigurationError
from pipeline.scheduler import DailySchedule, run_daily, wait_until


class FakeClock:
    def __init__(self, start):
        self.now = start

    def __call__(self):
        return self.now


class TestDailySchedule(unittest.TestCase):

    def test_later_today(self):
        schedule = DailySchedule(ScheduleConfig(hour=3, minute=30, timezone="UTC"))
        now = datetime(2025, 6, 15, 1, 0, tzinfo=timezone.utc)
        self.assertEqual(schedule.next_run_after(now), datetime(2025, 6, 15, 3, 30, tzinfo=timezone.utc))

    def test_rolls_to_tomorrow(self):
        schedule = DailySchedule(ScheduleConfig(hour=3, minute=0, timezone="UTC"))
        now = datetime(2025, 6, 15, 3, 0, tzinfo=timezone.utc)
        self.assertEqual(schedule.next_run_after(now), datetime(2025, 6, 16, 3, 0, tzinfo=timezone.utc))

    def test_local_time_zone(self):
        schedule = DailySchedule(ScheduleConfig(hour=2, minute=0, timezone="America/New_York"))
        # 05:00 UTC is 01:00 EDT in June
        now = datetime(2025, 6, 15, 5, 0, tzinfo=timezone.utc)
        self.assertEqual(schedule.next_run_after(now), datetime(2025, 6, 15, 6, 0, tzinfo=timezone.utc))

    def test_unknown_zone_is_configuration_error(self):
        with self.assertRaises(ConfigurationError):
            DailySchedule(ScheduleConfig(timezone="Mars/Olympus_Mons"))


class TestRunLoop(unittest.TestCase):

    def test_wait_returns_false_when_stopped(self):
        stop = threading.Event()
        stop.set()
        target = datetime.now(timezone.utc) + timedelta(hours=1)
        self.assertFalse(wait_until(target, stop, poll_seconds=0.01))

    def test_wait_returns_true_at_target(self):
        clock = FakeClock(datetime(2025, 6, 15, 3, 0, tzinfo=timezone.utc))
        self.assertTrue(wait_until(clock.now, threading.Event(), clock=clock))

    def test_cycle_errors_do_not_stop_loop(self):
        clock = FakeClock(datetime(2025, 6, 15, 2, 59, 59, 990000, tzinfo=timezone.utc))
        schedule = DailySchedule(ScheduleConfig(hour=3, minute=0))
        calls = []

        def cycle():
            calls.append(clock.now)
            clock.now += timedelta(days=1)
            raise RuntimeError("boom")

        stop = threading.Event()
        original_wait = stop.wait

        def fast_forward(timeout=None):
            clock.now += timedelta(seconds=timeout or 0)
            return original_wait(0)

        stop.wait = fast_forward
        started = run_daily(schedule, cycle, stop, poll_seconds=3600, clock=clock, max_cycles=2)

        self.assertEqual(started, 2)
        self.assertEqual(len(calls), 2)

    def test_stop_before_first_slot(self):
        stop = threading.Event()
        stop.set()
        started = run_daily(DailySchedule(ScheduleConfig()), lambda: None, stop, poll_seconds=0.01)
        self.assertEqual(started, 0)


if __name__ == "__main__":
    unittest.main()
