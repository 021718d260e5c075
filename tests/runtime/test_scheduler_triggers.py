import threading
import unittest

from pomodoro import InactivityWatchdog, SessionTimer
from runtime.scheduler import PeriodicTrigger, SessionScheduler


class _FakeClock:
    def __init__(self, now: float = 100.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class PeriodicTriggerTests(unittest.TestCase):
    def test_fires_once_per_interval_after_arming(self) -> None:
        calls: list[int] = []
        trigger = PeriodicTrigger("test", 1.0, lambda: calls.append(1))

        self.assertFalse(trigger.fire_if_due(100.0))
        trigger.arm(100.0)
        trigger.arm(100.5)

        self.assertEqual(1.0, trigger.seconds_until_due(100.0))
        self.assertFalse(trigger.fire_if_due(100.9))
        self.assertTrue(trigger.fire_if_due(101.0))
        self.assertFalse(trigger.fire_if_due(101.5))
        self.assertTrue(trigger.fire_if_due(102.0))
        self.assertEqual(2, len(calls))

    def test_missed_deadlines_are_dropped(self) -> None:
        calls: list[int] = []
        trigger = PeriodicTrigger("test", 1.0, lambda: calls.append(1))
        trigger.arm(0.0)

        self.assertTrue(trigger.fire_if_due(10.0))
        self.assertFalse(trigger.fire_if_due(10.5))

        self.assertEqual(1, len(calls))
        self.assertEqual(1.0, trigger.seconds_until_due(10.0))

    def test_disarm_stops_firing(self) -> None:
        calls: list[int] = []
        trigger = PeriodicTrigger("test", 1.0, lambda: calls.append(1))
        trigger.arm(0.0)
        trigger.disarm()

        self.assertFalse(trigger.armed)
        self.assertIsNone(trigger.seconds_until_due(5.0))
        self.assertFalse(trigger.fire_if_due(5.0))
        self.assertEqual([], calls)

    def test_interval_must_be_positive(self) -> None:
        with self.assertRaises(ValueError):
            PeriodicTrigger("test", 0, lambda: None)


class SessionSchedulerDueTests(unittest.TestCase):
    def test_countdown_follows_running_state(self) -> None:
        clock = _FakeClock()
        timer = SessionTimer(focus_duration_seconds=30)
        scheduler = SessionScheduler(timer, clock=clock)

        scheduler.run_due()
        self.assertFalse(scheduler.countdown_armed)

        timer.start()
        scheduler.run_due()
        self.assertTrue(scheduler.countdown_armed)
        self.assertEqual(30, timer.remaining_seconds())

        for _ in range(3):
            clock.advance(1.0)
            scheduler.run_due()
        self.assertEqual(27, timer.remaining_seconds())

        timer.pause()
        scheduler.run_due()
        self.assertFalse(scheduler.countdown_armed)

        clock.advance(10.0)
        scheduler.run_due()
        self.assertEqual(27, timer.remaining_seconds())

    def test_long_stall_advances_countdown_by_one_tick(self) -> None:
        clock = _FakeClock()
        timer = SessionTimer(focus_duration_seconds=30)
        scheduler = SessionScheduler(timer, clock=clock)
        timer.start()
        scheduler.run_due()

        clock.advance(15.0)
        scheduler.run_due()

        self.assertEqual(29, timer.remaining_seconds())

    def test_watchdog_cadence_idle_pauses_and_disarms_countdown(self) -> None:
        clock = _FakeClock()
        timer = SessionTimer()
        watchdog = InactivityWatchdog(timer, threshold_seconds=60.0, clock=clock)
        scheduler = SessionScheduler(timer, watchdog, clock=clock)
        timer.start()
        scheduler.run_due()

        for _ in range(60):
            clock.advance(1.0)
            scheduler.run_due()

        snapshot = timer.snapshot()
        self.assertFalse(snapshot.running)
        self.assertTrue(snapshot.idle_auto_paused)
        self.assertEqual(1140, snapshot.remaining_seconds)
        self.assertFalse(scheduler.countdown_armed)

        self.assertTrue(watchdog.report_activity())
        scheduler.run_due()
        self.assertTrue(scheduler.countdown_armed)


class SessionSchedulerThreadTests(unittest.TestCase):
    def test_call_runs_on_worker_thread(self) -> None:
        timer = SessionTimer()
        scheduler = SessionScheduler(timer)
        scheduler.start()
        try:
            self.assertTrue(scheduler.is_running)
            thread_name = scheduler.call(lambda: threading.current_thread().name)
            self.assertEqual("session-scheduler", thread_name)

            result = scheduler.call(timer.start)
            self.assertTrue(result.accepted)
            self.assertTrue(scheduler.call(lambda: scheduler.countdown_armed))
        finally:
            scheduler.stop()

        self.assertFalse(scheduler.is_running)
        self.assertFalse(scheduler.countdown_armed)
        scheduler.stop()

    def test_failed_work_item_surfaces_error_and_worker_survives(self) -> None:
        scheduler = SessionScheduler(SessionTimer())
        scheduler.start()
        try:
            def _explode() -> None:
                raise RuntimeError("boom")

            with self.assertRaises(RuntimeError):
                scheduler.call(_explode)
            self.assertEqual(42, scheduler.call(lambda: 42))
        finally:
            scheduler.stop()

    def test_nested_submit_runs_inline(self) -> None:
        scheduler = SessionScheduler(SessionTimer())
        scheduler.start()
        try:
            outer = scheduler.call(lambda: scheduler.submit(lambda: "inner").result(timeout=0))
            self.assertEqual("inner", outer)
        finally:
            scheduler.stop()

    def test_report_activity_without_watchdog_is_noop(self) -> None:
        scheduler = SessionScheduler(SessionTimer())
        self.assertIsNone(scheduler.report_activity())


if __name__ == "__main__":
    unittest.main()
