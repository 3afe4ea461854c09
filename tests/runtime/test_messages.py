import io
import json
import threading
import time
import unittest

from pomodoro.constants import Phase, RunState
from pomodoro.service import TimerSnapshot
from runtime.console import ConsoleStatus
from runtime.messages import format_duration, status_bar_json, status_line


def _snapshot(**overrides) -> TimerSnapshot:
    values = {
        "phase": Phase.POMODORO,
        "run_state": RunState.RUNNING,
        "elapsed_seconds": 312.9,
        "duration_seconds": 1500,
        "cycle": 2,
    }
    values.update(overrides)
    return TimerSnapshot(**values)


class MessageFormattingTests(unittest.TestCase):
    def test_format_duration(self) -> None:
        self.assertEqual("00:00", format_duration(0))
        self.assertEqual("05:12", format_duration(312))
        self.assertEqual("90:00", format_duration(5400))
        self.assertEqual("00:00", format_duration(-3))

    def test_status_line_running(self) -> None:
        self.assertEqual(
            "Pomodoro | elapsed 05:12 | remaining 19:48 | cycle 2",
            status_line(_snapshot()),
        )

    def test_status_line_marks_paused_and_stopped(self) -> None:
        paused = status_line(_snapshot(phase=Phase.LONG_BREAK, run_state=RunState.PAUSED))
        stopped = status_line(_snapshot(run_state=RunState.STOPPED))

        self.assertTrue(paused.startswith("Long break |"))
        self.assertTrue(paused.endswith("[paused]"))
        self.assertTrue(stopped.endswith("[stopped]"))

    def test_status_bar_json(self) -> None:
        payload = json.loads(status_bar_json(_snapshot(phase=Phase.SHORT_BREAK, duration_seconds=300)))
        self.assertEqual(
            {
                "elapsed_time": "05:00",
                "text": "00:00",
                "class": "ShortBreak",
                "alt": "Running",
            },
            payload,
        )


class _CharByCharStream(io.StringIO):
    def write(self, text: str) -> int:
        for char in text:
            super().write(char)
            time.sleep(0)
        return len(text)


class ConsoleStatusTests(unittest.TestCase):
    def test_text_format_writes_status_line(self) -> None:
        stream = io.StringIO()
        ConsoleStatus("text", stream=stream).show(_snapshot())
        self.assertEqual(status_line(_snapshot()) + "\n", stream.getvalue())

    def test_json_format_writes_status_bar_line(self) -> None:
        stream = io.StringIO()
        ConsoleStatus("json", stream=stream).show(_snapshot())
        self.assertEqual("19:48", json.loads(stream.getvalue())["text"])

    def test_none_format_is_silent(self) -> None:
        stream = io.StringIO()
        ConsoleStatus("none", stream=stream).show(_snapshot())
        self.assertEqual("", stream.getvalue())

    def test_concurrent_writers_never_interleave_lines(self) -> None:
        stream = _CharByCharStream()
        console = ConsoleStatus("text", stream=stream)
        paused = _snapshot(run_state=RunState.PAUSED)

        def writer(snapshot: TimerSnapshot) -> None:
            for _ in range(25):
                console.show(snapshot)

        threads = [
            threading.Thread(target=writer, args=(snapshot,))
            for snapshot in (_snapshot(), paused, _snapshot(), paused)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10.0)

        lines = stream.getvalue().splitlines()
        self.assertEqual(100, len(lines))
        self.assertEqual({status_line(_snapshot()), status_line(paused)}, set(lines))

    def test_unknown_format_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            ConsoleStatus("xml")


if __name__ == "__main__":
    unittest.main()
