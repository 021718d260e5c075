import threading
import unittest
from dataclasses import replace
from typing import Any, Callable, Optional
from unittest.mock import ANY, Mock

from activity import ActivityMonitorError
from app_config import ActivitySettings, AppConfig, TimerSettings
from runtime import CommandError, RuntimeBootstrap, RuntimeEngine


class _FakeUIServer:
    def __init__(self):
        self.events: list[tuple[str, dict[str, Any]]] = []
        self.handler: Optional[Callable[[dict[str, Any]], None]] = None
        self.stopped = False
        self._condition = threading.Condition()

    def publish(self, event_type: str, **payload: Any) -> None:
        with self._condition:
            self.events.append((event_type, payload))
            self._condition.notify_all()

    def set_message_handler(self, handler) -> None:
        self.handler = handler

    def stop(self, timeout_seconds: float = 5.0) -> None:
        del timeout_seconds
        self.stopped = True

    def wait_for(self, event_type: str, count: int = 1, timeout: float = 5.0) -> list[dict[str, Any]]:
        def _matching() -> list[dict[str, Any]]:
            return [payload for name, payload in self.events if name == event_type]

        with self._condition:
            self._condition.wait_for(lambda: len(_matching()) >= count, timeout=timeout)
            return _matching()


class _FakeActivitySource:
    def __init__(self, on_activity):
        self.on_activity = on_activity
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True

    def stop(self) -> None:
        self.stopped = True


def _app_config(**timer_overrides) -> AppConfig:
    return AppConfig(timer=replace(TimerSettings(), **timer_overrides))


class RuntimeEngineTests(unittest.TestCase):
    def _start_engine(self, engine: RuntimeEngine) -> tuple[threading.Thread, list[int]]:
        exit_codes: list[int] = []
        thread = threading.Thread(target=lambda: exit_codes.append(engine.run()), daemon=True)
        thread.start()
        return thread, exit_codes

    def _stop_engine(self, engine: RuntimeEngine, thread: threading.Thread) -> None:
        engine.request_shutdown()
        thread.join(timeout=5.0)
        self.assertFalse(thread.is_alive())

    def test_engine_builds_timer_from_config_minutes(self) -> None:
        config = _app_config(focus_minutes=25, short_break_minutes=3, sessions_until_long_break=2)
        engine = RuntimeEngine(RuntimeBootstrap(logger=Mock(), app_config=config))

        snapshot = engine.timer.snapshot()
        self.assertEqual(1500, snapshot.remaining_seconds)
        self.assertEqual(180, snapshot.short_break_duration_seconds)
        self.assertEqual(2, snapshot.sessions_until_long_break)
        self.assertEqual(60.0, engine.watchdog.threshold_seconds)

    def test_run_publishes_initial_display_and_applies_ui_commands(self) -> None:
        ui_server = _FakeUIServer()
        sources: list[_FakeActivitySource] = []

        def _factory(on_activity):
            source = _FakeActivitySource(on_activity)
            sources.append(source)
            return source

        engine = RuntimeEngine(
            RuntimeBootstrap(
                logger=Mock(),
                app_config=_app_config(),
                ui_server=ui_server,
                activity_factory=_factory,
            )
        )
        thread, exit_codes = self._start_engine(engine)
        try:
            displays = ui_server.wait_for("display")
            self.assertEqual("Paused 20m", displays[0]["text"])
            self.assertIsNotNone(ui_server.handler)

            engine.handle_ui_message({"type": "command", "command": "add_time", "minutes": 5})
            result = ui_server.wait_for("command_result")[0]
            self.assertTrue(result["accepted"])
            self.assertEqual(1500, result["remaining_seconds"])

            engine.handle_ui_message({"type": "command", "command": "skip_break"})
            rejected = ui_server.wait_for("command_result", count=2)[1]
            self.assertFalse(rejected["accepted"])
            self.assertEqual("There is no break to skip.", rejected["message"])
        finally:
            self._stop_engine(engine, thread)

        self.assertEqual([0], exit_codes)
        self.assertTrue(sources[0].started)
        self.assertTrue(sources[0].stopped)
        self.assertTrue(ui_server.stopped)
        self.assertIsNone(ui_server.handler)

    def test_auto_start_runs_timer(self) -> None:
        ui_server = _FakeUIServer()
        config = replace(
            _app_config(auto_start=True),
            activity=ActivitySettings(enabled=False),
        )
        engine = RuntimeEngine(RuntimeBootstrap(logger=Mock(), app_config=config, ui_server=ui_server))
        thread, _exit_codes = self._start_engine(engine)
        try:
            ui_server.wait_for("display", count=2)
            self.assertTrue(engine.timer.is_running())
        finally:
            self._stop_engine(engine, thread)

    def test_activity_source_failure_is_not_fatal(self) -> None:
        logger = Mock()

        def _factory(on_activity):
            raise ActivityMonitorError("no display")

        engine = RuntimeEngine(
            RuntimeBootstrap(logger=logger, app_config=_app_config(), activity_factory=_factory)
        )
        thread, exit_codes = self._start_engine(engine)
        self._stop_engine(engine, thread)

        self.assertEqual([0], exit_codes)
        logger.warning.assert_any_call("Activity detection unavailable: %s", ANY)

    def test_malformed_messages_raise_command_error(self) -> None:
        engine = RuntimeEngine(RuntimeBootstrap(logger=Mock(), app_config=_app_config()))

        with self.assertRaises(CommandError):
            engine.handle_ui_message({"type": "command", "command": "explode"})
        with self.assertRaises(CommandError):
            engine.handle_ui_message({"type": "command", "command": "add_time"})
        with self.assertRaises(CommandError):
            engine.handle_ui_message({"type": "telemetry"})

    def test_activity_message_resumes_idle_pause(self) -> None:
        engine = RuntimeEngine(RuntimeBootstrap(logger=Mock(), app_config=_app_config()))
        engine.timer.start()
        engine.timer.pause(reason="idle")
        engine.scheduler.start()
        try:
            engine.handle_ui_message({"type": "activity"})
            self.assertTrue(engine.scheduler.call(engine.timer.is_running))
        finally:
            engine.scheduler.stop()


if __name__ == "__main__":
    unittest.main()
