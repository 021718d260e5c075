"""Single-threaded scheduler that serializes ticks, commands, and activity."""

from __future__ import annotations

import concurrent.futures
import logging
import threading
import time
from dataclasses import dataclass
from queue import Empty, Queue
from typing import Any, Callable, Optional

from pomodoro import InactivityWatchdog, SessionTimer

DEFAULT_TICK_INTERVAL_SECONDS = 1.0
_MAX_IDLE_WAIT_SECONDS = 0.25


class PeriodicTrigger:
    """Deadline-based repeating trigger evaluated by its owner's thread."""

    def __init__(self, name: str, interval_seconds: float, callback: Callable[[], Any]):
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be greater than zero")
        self.name = name
        self._interval = float(interval_seconds)
        self._callback = callback
        self._deadline: Optional[float] = None

    @property
    def armed(self) -> bool:
        return self._deadline is not None

    def arm(self, now: float) -> None:
        if self._deadline is None:
            self._deadline = now + self._interval

    def disarm(self) -> None:
        self._deadline = None

    def seconds_until_due(self, now: float) -> Optional[float]:
        if self._deadline is None:
            return None
        return max(0.0, self._deadline - now)

    def fire_if_due(self, now: float) -> bool:
        if self._deadline is None or now < self._deadline:
            return False

        self._deadline += self._interval
        if self._deadline <= now:
            # Missed deadlines are dropped rather than replayed.
            self._deadline = now + self._interval
        self._callback()
        return True


@dataclass
class _WorkItem:
    fn: Callable[..., Any]
    args: tuple[Any, ...]
    kwargs: dict[str, Any]
    future: concurrent.futures.Future


class SessionScheduler:
    """Runs the countdown tick, watchdog tick, and all mutations on one thread.

    Other threads never touch the timer directly; they marshal work through
    ``submit()``/``call()`` and the worker runs each item to completion
    between trigger evaluations.
    """

    def __init__(
        self,
        timer: SessionTimer,
        watchdog: Optional[InactivityWatchdog] = None,
        *,
        tick_interval_seconds: float = DEFAULT_TICK_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        logger: Optional[logging.Logger] = None,
    ):
        self._timer = timer
        self._watchdog = watchdog
        self._clock = clock
        self._logger = logger or logging.getLogger("scheduler")
        self._queue: Queue[Optional[_WorkItem]] = Queue()
        self._thread: Optional[threading.Thread] = None
        self._stop_requested = threading.Event()

        self._main_trigger = PeriodicTrigger("countdown", tick_interval_seconds, timer.tick)
        self._watchdog_trigger: Optional[PeriodicTrigger] = None
        if watchdog is not None:
            self._watchdog_trigger = PeriodicTrigger(
                "watchdog",
                tick_interval_seconds,
                watchdog.check,
            )

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def countdown_armed(self) -> bool:
        return self._main_trigger.armed

    def start(self) -> None:
        if self.is_running:
            self._logger.warning("Scheduler is already running")
            return

        self._stop_requested.clear()
        now = self._clock()
        if self._watchdog_trigger is not None:
            self._watchdog_trigger.arm(now)
        self._sync_countdown(now)

        self._thread = threading.Thread(
            target=self._run_loop,
            daemon=True,
            name="session-scheduler",
        )
        self._thread.start()
        self._logger.info("Scheduler started")

    def stop(self, timeout_seconds: float = 5.0) -> None:
        if self._thread is None:
            return

        self._stop_requested.set()
        self._queue.put(None)
        self._thread.join(timeout=timeout_seconds)
        if self._thread.is_alive():
            self._logger.error(
                "Scheduler thread did not stop within %.1fs",
                timeout_seconds,
            )

        self._thread = None
        self._main_trigger.disarm()
        if self._watchdog_trigger is not None:
            self._watchdog_trigger.disarm()
        self._logger.info("Scheduler stopped")

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> concurrent.futures.Future:
        """Queue ``fn`` for the worker thread and return its future."""
        future: concurrent.futures.Future = concurrent.futures.Future()
        if threading.current_thread() is self._thread:
            self._execute(_WorkItem(fn, args, kwargs, future))
            return future

        self._queue.put(_WorkItem(fn, args, kwargs, future))
        return future

    def call(
        self,
        fn: Callable[..., Any],
        *args: Any,
        timeout: Optional[float] = 5.0,
        **kwargs: Any,
    ) -> Any:
        """Run ``fn`` on the worker thread and wait for its result."""
        return self.submit(fn, *args, **kwargs).result(timeout=timeout)

    def report_activity(self) -> Optional[concurrent.futures.Future]:
        if self._watchdog is None:
            return None
        return self.submit(self._watchdog.report_activity)

    def run_due(self, now: Optional[float] = None) -> None:
        """Fire every trigger whose deadline has passed, then resync the countdown."""
        current = self._clock() if now is None else now
        self._sync_countdown(current)
        self._main_trigger.fire_if_due(current)
        if self._watchdog_trigger is not None:
            self._watchdog_trigger.arm(current)
            self._watchdog_trigger.fire_if_due(current)
        self._sync_countdown(current)

    def _run_loop(self) -> None:
        while not self._stop_requested.is_set():
            try:
                item = self._queue.get(timeout=self._next_wait_seconds())
            except Empty:
                item = None

            if item is not None:
                self._execute(item)
            try:
                self.run_due()
            except Exception as error:
                self._logger.error("Scheduled tick failed: %s", error, exc_info=True)

        self._drain_pending()

    def _next_wait_seconds(self) -> float:
        now = self._clock()
        waits = [
            wait
            for wait in (
                self._main_trigger.seconds_until_due(now),
                self._watchdog_trigger.seconds_until_due(now)
                if self._watchdog_trigger is not None
                else None,
            )
            if wait is not None
        ]
        if not waits:
            return _MAX_IDLE_WAIT_SECONDS
        return min(waits)

    def _execute(self, item: _WorkItem) -> None:
        if not item.future.set_running_or_notify_cancel():
            return
        try:
            result = item.fn(*item.args, **item.kwargs)
        except Exception as error:
            self._logger.error("Scheduled work item failed: %s", error, exc_info=True)
            item.future.set_exception(error)
        else:
            item.future.set_result(result)
        self._sync_countdown(self._clock())

    def _sync_countdown(self, now: float) -> None:
        if self._timer.is_running():
            self._main_trigger.arm(now)
        else:
            self._main_trigger.disarm()

    def _drain_pending(self) -> None:
        while True:
            try:
                item = self._queue.get_nowait()
            except Empty:
                return
            if item is not None:
                item.future.cancel()
