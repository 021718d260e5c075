"""Runtime orchestration: wires the session, scheduler, UI bridge, and input listeners."""

from __future__ import annotations

import concurrent.futures
import logging
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional, Protocol

from activity import ActivityMonitor, ActivityMonitorError
from app_config import AppConfig
from contracts.ui_protocol import MESSAGE_ACTIVITY, MESSAGE_COMMAND
from pomodoro import InactivityWatchdog, SessionTimer

from .commands import CommandError, SessionCommandDispatcher, parse_command
from .scheduler import SessionScheduler
from .ui import RuntimeUIPublisher


class UIServerBridge(Protocol):
    def publish(self, event_type: str, **payload: Any) -> None:
        ...

    def set_message_handler(self, handler: Optional[Callable[[dict[str, Any]], None]]) -> None:
        ...

    def stop(self, timeout_seconds: float = 5.0) -> None:
        ...


class ActivitySource(Protocol):
    def start(self) -> None:
        ...

    def stop(self) -> None:
        ...


@dataclass(frozen=True)
class RuntimeBootstrap:
    """Dependency bundle required to construct the runtime engine."""
    logger: logging.Logger
    app_config: AppConfig
    ui_server: Optional[UIServerBridge] = None
    activity_factory: Optional[Callable[[Callable[[], Any]], ActivitySource]] = None


class RuntimeEngine:
    """Owns the session timer and everything that drives or observes it."""

    def __init__(self, bootstrap: RuntimeBootstrap):
        self._bootstrap = bootstrap
        self._logger = bootstrap.logger
        config = bootstrap.app_config

        self._timer = SessionTimer(
            focus_duration_seconds=config.timer.focus_minutes * 60,
            short_break_duration_seconds=config.timer.short_break_minutes * 60,
            long_break_duration_seconds=config.timer.long_break_minutes * 60,
            sessions_until_long_break=config.timer.sessions_until_long_break,
            logger=logging.getLogger("pomodoro"),
        )
        self._watchdog = InactivityWatchdog(
            self._timer,
            threshold_seconds=config.watchdog.inactivity_threshold_seconds,
            enabled=config.watchdog.enabled,
            logger=logging.getLogger("watchdog"),
        )
        self._scheduler = SessionScheduler(
            self._timer,
            self._watchdog,
            logger=logging.getLogger("scheduler"),
        )
        self._dispatcher = SessionCommandDispatcher(
            timer=self._timer,
            watchdog=self._watchdog,
            logger=logging.getLogger("runtime.commands"),
        )
        self._ui = RuntimeUIPublisher(bootstrap.ui_server, self._timer.snapshot)
        self._timer.subscribe(self._ui)

        self._activity_source: Optional[ActivitySource] = None
        self._shutdown_requested = threading.Event()

    @property
    def timer(self) -> SessionTimer:
        return self._timer

    @property
    def watchdog(self) -> InactivityWatchdog:
        return self._watchdog

    @property
    def scheduler(self) -> SessionScheduler:
        return self._scheduler

    def request_shutdown(self) -> None:
        self._shutdown_requested.set()

    def run(self) -> int:
        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            ui_server.set_message_handler(self.handle_ui_message)

        try:
            self._scheduler.start()
            self._start_activity_source()
            self._scheduler.call(self._ui.publish_display)
            if self._bootstrap.app_config.timer.auto_start:
                self._scheduler.call(self._timer.start)

            self._logger.info("Ready! %s", self._timer.display_text())
            while not self._shutdown_requested.wait(0.25):
                if not self._scheduler.is_running:
                    self._logger.error("Scheduler stopped unexpectedly")
                    return 1
            return 0

        except KeyboardInterrupt:
            self._logger.info("Shutdown requested by keyboard interrupt.")
            return 0
        except Exception as error:
            self._logger.error("Unexpected error: %s", error, exc_info=True)
            return 1
        finally:
            self._shutdown()

    def handle_ui_message(self, payload: dict[str, Any]) -> None:
        """Marshal one inbound UI message onto the scheduler thread."""
        message_type = payload.get("type")
        if message_type == MESSAGE_ACTIVITY:
            self.report_activity()
            return

        if message_type == MESSAGE_COMMAND:
            command, argument = parse_command(payload)
            future = self._scheduler.submit(self._dispatcher.apply, command, argument)
            future.add_done_callback(self._publish_command_outcome)
            return

        raise CommandError(f"Unsupported message type: {message_type!r}")

    def report_activity(self) -> None:
        self._scheduler.report_activity()

    def _publish_command_outcome(self, future: concurrent.futures.Future) -> None:
        if future.cancelled():
            return
        error = future.exception()
        if error is not None:
            self._ui.publish_error(f"Command failed: {error}")
            return
        self._ui.publish_command_result(future.result())

    def _start_activity_source(self) -> None:
        settings = self._bootstrap.app_config.activity
        if not settings.enabled:
            self._logger.info("Activity detection disabled; idle pauses need UI activity reports.")
            return

        factory = self._bootstrap.activity_factory or self._default_activity_factory
        try:
            source = factory(self.report_activity)
            source.start()
        except ActivityMonitorError as error:
            self._logger.warning("Activity detection unavailable: %s", error)
            self._logger.warning("Continuing without activity detection.")
            return
        self._activity_source = source

    def _default_activity_factory(self, on_activity: Callable[[], Any]) -> ActivitySource:
        return ActivityMonitor(
            on_activity,
            min_report_interval_seconds=(
                self._bootstrap.app_config.activity.min_report_interval_seconds
            ),
            logger=logging.getLogger("activity"),
        )

    def _shutdown(self) -> None:
        if self._activity_source is not None:
            self._logger.info("Stopping activity detection...")
            try:
                self._activity_source.stop()
            except Exception as error:
                self._logger.error("Error stopping activity detection: %s", error, exc_info=True)
            self._activity_source = None

        self._logger.info("Stopping scheduler...")
        self._scheduler.stop(timeout_seconds=5.0)

        ui_server = self._bootstrap.ui_server
        if ui_server is not None:
            ui_server.set_message_handler(None)
            self._logger.info("Stopping UI server...")
            try:
                ui_server.stop(timeout_seconds=5.0)
            except Exception as error:
                self._logger.error("Error stopping UI server: %s", error, exc_info=True)
