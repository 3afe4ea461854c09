import json
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from pomodoro.constants import Phase, RunState
from pomodoro.service import TimerEngine, TimerSnapshot
from pomodoro.store import StateStore


def _snapshot(**overrides) -> TimerSnapshot:
    values = {
        "phase": Phase.POMODORO,
        "run_state": RunState.STOPPED,
        "elapsed_seconds": 312.6,
        "duration_seconds": 1500,
        "cycle": 2,
    }
    values.update(overrides)
    return TimerSnapshot(**values)


class StateStoreTests(unittest.TestCase):
    def test_save_writes_documented_json_shape(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "pomodoro_state.json"
            store = StateStore(path)

            self.assertTrue(store.save(_snapshot()))

            payload = json.loads(path.read_text(encoding="utf-8"))
            self.assertEqual(
                {
                    "phase": "Pomodoro",
                    "state": "Stopped",
                    "elapsed": 312,
                    "remaining": 1188,
                    "cycle": 2,
                },
                payload,
            )
            self.assertEqual([path.name], [p.name for p in Path(temp_dir).iterdir()])

    def test_save_creates_missing_parent_directories(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "nested" / "state.json"
            self.assertTrue(StateStore(path).save(_snapshot()))
            self.assertTrue(path.is_file())

    def test_save_failure_is_logged_not_raised(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            store = StateStore(Path(temp_dir) / "state.json")
            with patch("pomodoro.store.os.replace", side_effect=PermissionError("denied")):
                with self.assertLogs("pomodoro.store", level="ERROR"):
                    saved = store.save(_snapshot())

            self.assertFalse(saved)
            self.assertEqual([], list(Path(temp_dir).iterdir()))

    def test_load_returns_none_when_file_missing(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            self.assertIsNone(StateStore(Path(temp_dir) / "missing.json").load())

    def test_load_round_trips_saved_state(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            store = StateStore(Path(temp_dir) / "state.json")
            store.save(_snapshot(phase=Phase.LONG_BREAK, run_state=RunState.PAUSED, cycle=4))

            persisted = store.load()

            self.assertIsNotNone(persisted)
            if persisted is None:
                self.fail("Expected persisted state")
            self.assertEqual(Phase.LONG_BREAK, persisted.phase)
            self.assertEqual(312, persisted.elapsed_seconds)
            self.assertEqual(4, persisted.cycle)

    def test_load_ignores_malformed_content(self) -> None:
        cases = [
            "not json",
            "[1, 2, 3]",
            '{"phase": "Nap", "state": "Running", "elapsed": 1, "cycle": 0}',
            '{"phase": "Pomodoro", "state": "Running", "elapsed": -5, "cycle": 0}',
            '{"phase": "Pomodoro", "state": "Running", "elapsed": 5, "cycle": "two"}',
        ]
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "state.json"
            store = StateStore(path)
            for raw in cases:
                with self.subTest(raw=raw):
                    path.write_text(raw, encoding="utf-8")
                    with self.assertLogs("pomodoro.store", level="WARNING"):
                        self.assertIsNone(store.load())

    def test_engine_stop_writes_state_file(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = Path(temp_dir) / "state.json"
            engine = TimerEngine(persister=StateStore(path))
            engine.apply_command("start")
            engine.tick(60.0)

            result = engine.apply_command("stop")

            payload = json.loads(path.read_text(encoding="utf-8"))
            self.assertEqual(result.snapshot.to_dict(), payload)
            self.assertEqual("Stopped", payload["state"])
            self.assertEqual(60, payload["elapsed"])


if __name__ == "__main__":
    unittest.main()
