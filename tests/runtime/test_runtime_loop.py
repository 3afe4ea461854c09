import io
import json
import logging
import tempfile
import unittest
from pathlib import Path
from typing import Callable

from pomodoro.constants import Phase, RunState
from pomodoro.service import TimerDurations, TimerEngine
from pomodoro.store import StateStore
from runtime.console import ConsoleStatus
from runtime.loop import RuntimeBootstrap, RuntimeEngine


class _ListenerStub:
    """Stands in for the FIFO listener; replays scripted commands on start."""

    def __init__(self, handler: Callable[[str], None], script: list[str], after=None):
        self._handler = handler
        self._script = script
        self._after = after
        self.started = False
        self.stopped = False

    def start(self) -> None:
        self.started = True
        for text in self._script:
            self._handler(text)
        if self._after is not None:
            self._after()

    def stop(self) -> None:
        self.stopped = True


class _StoppingNotifier:
    """Issues a stop from inside the notification, as a FIFO writer racing the ticker would."""

    def __init__(self):
        self.runtime = None

    def notify(self, phase: Phase) -> bool:
        self.runtime.handle_command("stop")
        return True


class RuntimeLoopTests(unittest.TestCase):
    def _runtime(
        self,
        temp_dir: str,
        script: list[str],
        *,
        exit_on_stop: bool = True,
        after=None,
        notifier=None,
    ):
        store = StateStore(Path(temp_dir) / "state.json")
        engine = TimerEngine(
            durations=TimerDurations(pomodoro_seconds=10, short_break_seconds=2),
            persister=store,
        )
        listeners: list[_ListenerStub] = []
        stream = io.StringIO()

        def factory(handler):
            listener = _ListenerStub(handler, script, after)
            listeners.append(listener)
            return listener

        runtime = RuntimeEngine(
            RuntimeBootstrap(
                logger=logging.getLogger("test.runtime"),
                engine=engine,
                console=ConsoleStatus("text", stream=stream),
                command_listener_factory=factory,
                tick_interval_seconds=0.01,
                exit_on_stop=exit_on_stop,
                notifier=notifier,
            )
        )
        return runtime, listeners, store, stream

    def test_stop_command_persists_and_exits(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            runtime, listeners, store, _ = self._runtime(temp_dir, ["start", "stop"])

            exit_code = runtime.run()

            self.assertEqual(0, exit_code)
            self.assertTrue(listeners[0].started)
            self.assertTrue(listeners[0].stopped)
            payload = json.loads(store.path.read_text(encoding="utf-8"))
            self.assertEqual("Stopped", payload["state"])
            self.assertEqual("Pomodoro", payload["phase"])

    def test_shutdown_request_saves_running_state(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            holder: list[RuntimeEngine] = []
            runtime, _, store, _ = self._runtime(
                temp_dir,
                ["start"],
                after=lambda: holder[0].request_shutdown(),
            )
            holder.append(runtime)

            self.assertEqual(0, runtime.run())

            payload = json.loads(store.path.read_text(encoding="utf-8"))
            self.assertEqual("Running", payload["state"])

    def test_stop_without_exit_keeps_timer_revivable(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            runtime, _, _, _ = self._runtime(temp_dir, [], exit_on_stop=False)

            runtime.handle_command("start")
            runtime.handle_command("stop")
            result = runtime.handle_command("start")
            runtime.tick(3.0)

            self.assertTrue(result.accepted)
            self.assertEqual(RunState.RUNNING, runtime.engine.snapshot().run_state)
            self.assertEqual(3.0, runtime.engine.snapshot().elapsed_seconds)

    def test_ticks_drive_phase_transitions_and_console(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            runtime, _, store, stream = self._runtime(temp_dir, [])

            runtime.handle_command("start")
            runtime.tick(4.0)
            runtime.tick(6.0)

            snapshot = runtime.engine.snapshot()
            self.assertEqual(Phase.SHORT_BREAK, snapshot.phase)
            self.assertEqual(1, snapshot.cycle)
            self.assertIn("Short break | elapsed 00:00", stream.getvalue())
            payload = json.loads(store.path.read_text(encoding="utf-8"))
            self.assertEqual("ShortBreak", payload["phase"])

    def test_stop_during_transition_notification_is_what_lands_on_disk(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            notifier = _StoppingNotifier()
            runtime, _, store, _ = self._runtime(temp_dir, [], notifier=notifier)
            notifier.runtime = runtime

            runtime.handle_command("start")
            runtime.tick(10.0)

            self.assertEqual(RunState.STOPPED, runtime.engine.snapshot().run_state)
            payload = json.loads(store.path.read_text(encoding="utf-8"))
            self.assertEqual("Stopped", payload["state"])
            self.assertEqual("ShortBreak", payload["phase"])
            self.assertEqual(1, payload["cycle"])

    def test_shutdown_overwrites_state_file_with_final_snapshot(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            holder: list[RuntimeEngine] = []
            runtime, _, store, _ = self._runtime(
                temp_dir,
                ["start", "stop", "start"],
                exit_on_stop=False,
                after=lambda: holder[0].request_shutdown(),
            )
            holder.append(runtime)

            runtime.run()

            payload = json.loads(store.path.read_text(encoding="utf-8"))
            self.assertEqual("Running", payload["state"])

    def test_unknown_command_is_ignored(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            runtime, _, _, stream = self._runtime(temp_dir, [])
            before = runtime.engine.snapshot()

            with self.assertLogs("pomodoro", level="WARNING"):
                result = runtime.handle_command("launch")

            self.assertFalse(result.accepted)
            self.assertEqual(before, runtime.engine.snapshot())
            self.assertEqual("", stream.getvalue())


if __name__ == "__main__":
    unittest.main()
