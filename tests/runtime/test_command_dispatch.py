import unittest
from unittest.mock import Mock

from contracts.command_contract import (
    COMMAND_INTEGER_ARGUMENT,
    COMMAND_NAME_ORDER,
    COMMAND_NAMES,
    COMMANDS_WITHOUT_ARGUMENTS,
)
from pomodoro import InactivityWatchdog, SessionTimer
from runtime.commands import CommandError, SessionCommandDispatcher, parse_command


class _FakeClock:
    def __init__(self, now: float = 0.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


class ParseCommandTests(unittest.TestCase):
    def test_command_contract_is_consistent(self) -> None:
        self.assertEqual(set(COMMAND_NAME_ORDER), COMMAND_NAMES)
        self.assertEqual(len(COMMAND_NAME_ORDER), len(COMMAND_NAMES))
        self.assertEqual(
            COMMAND_NAMES,
            set(COMMAND_INTEGER_ARGUMENT) | set(COMMANDS_WITHOUT_ARGUMENTS),
        )
        self.assertFalse(set(COMMAND_INTEGER_ARGUMENT) & set(COMMANDS_WITHOUT_ARGUMENTS))

    def test_parses_commands_without_arguments(self) -> None:
        self.assertEqual(("start", None), parse_command({"command": "start"}))
        self.assertEqual(("skip_break", None), parse_command({"command": " skip_break "}))

    def test_parses_integer_arguments(self) -> None:
        self.assertEqual(("add_time", 5), parse_command({"command": "add_time", "minutes": 5}))
        self.assertEqual(
            ("set_focus_duration", 25),
            parse_command({"command": "set_focus_duration", "minutes": "25"}),
        )
        self.assertEqual(
            ("set_sessions_until_long_break", 3),
            parse_command({"command": "set_sessions_until_long_break", "sessions": 3.0}),
        )

    def test_rejects_unknown_command(self) -> None:
        with self.assertRaises(CommandError):
            parse_command({"command": "explode"})
        with self.assertRaises(CommandError):
            parse_command({})

    def test_rejects_missing_or_malformed_argument(self) -> None:
        for payload in (
            {"command": "add_time"},
            {"command": "add_time", "minutes": True},
            {"command": "add_time", "minutes": 1.5},
            {"command": "add_time", "minutes": "soon"},
            {"command": "set_sessions_until_long_break", "minutes": 4},
        ):
            with self.subTest(payload=payload):
                with self.assertRaises(CommandError):
                    parse_command(payload)


class SessionCommandDispatcherTests(unittest.TestCase):
    def test_dispatch_routes_every_command_to_timer(self) -> None:
        timer = SessionTimer(focus_duration_seconds=300, short_break_duration_seconds=60)
        dispatcher = SessionCommandDispatcher(timer=timer)

        self.assertTrue(dispatcher.dispatch({"command": "start"}).accepted)
        self.assertTrue(dispatcher.dispatch({"command": "add_time", "minutes": 1}).accepted)
        self.assertEqual(360, timer.remaining_seconds())
        self.assertTrue(dispatcher.dispatch({"command": "pause"}).accepted)
        self.assertTrue(dispatcher.dispatch({"command": "start_break"}).accepted)
        self.assertEqual("short_break", timer.current_mode())
        self.assertTrue(dispatcher.dispatch({"command": "skip_break"}).accepted)
        self.assertEqual("focus", timer.current_mode())

        result = dispatcher.dispatch({"command": "set_focus_duration", "minutes": 10})
        self.assertEqual("set_focus_duration", result.action)
        self.assertEqual(600, timer.remaining_seconds())

        dispatcher.dispatch({"command": "set_short_break_duration", "minutes": 3})
        dispatcher.dispatch({"command": "set_long_break_duration", "minutes": 20})
        dispatcher.dispatch({"command": "set_sessions_until_long_break", "sessions": 2})
        snapshot = timer.snapshot()
        self.assertEqual(180, snapshot.short_break_duration_seconds)
        self.assertEqual(1200, snapshot.long_break_duration_seconds)
        self.assertEqual(2, snapshot.sessions_until_long_break)

        self.assertTrue(dispatcher.dispatch({"command": "reset"}).accepted)
        self.assertEqual(0, timer.snapshot().completed_focus_sessions)

    def test_rejected_command_returns_reason(self) -> None:
        timer = SessionTimer()
        dispatcher = SessionCommandDispatcher(timer=timer)

        result = dispatcher.apply("skip_break")

        self.assertFalse(result.accepted)
        self.assertEqual("not_on_break", result.reason)

    def test_apply_rejects_unknown_command(self) -> None:
        dispatcher = SessionCommandDispatcher(timer=SessionTimer())
        with self.assertRaises(CommandError):
            dispatcher.apply("explode")

    def test_command_touches_watchdog_without_resuming_idle_pause(self) -> None:
        clock = _FakeClock()
        timer = SessionTimer()
        watchdog = InactivityWatchdog(timer, clock=clock)
        dispatcher = SessionCommandDispatcher(timer=timer, watchdog=watchdog)
        timer.start()
        clock.now = 60.0
        watchdog.check()

        clock.now = 75.0
        dispatcher.apply("add_time", 1)

        self.assertEqual(75.0, watchdog.last_activity)
        self.assertFalse(timer.is_running())
        self.assertTrue(timer.snapshot().idle_auto_paused)

    def test_rejected_command_is_logged(self) -> None:
        logger = Mock()
        dispatcher = SessionCommandDispatcher(timer=SessionTimer(), logger=logger)

        dispatcher.apply("pause")

        logger.info.assert_called_once_with("Command rejected: %s (%s)", "pause", "not_running")


if __name__ == "__main__":
    unittest.main()
