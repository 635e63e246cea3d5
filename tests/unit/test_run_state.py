"""Tests for last-run state helpers."""

from datetime import datetime, timezone
from pathlib import Path

from feedline.storage import load_last_run, save_last_run


class TestRunState:
    def test_missing_file_returns_none(self, tmp_path: Path):
        """No state file means no previous run."""
        assert load_last_run(tmp_path / "run_state.json") is None

    def test_save_and_load(self, tmp_path: Path):
        """A saved run time is loaded back at second precision."""
        when = datetime(2026, 2, 20, 12, 0, 30, 999, tzinfo=timezone.utc)
        path = tmp_path / "nested" / "run_state.json"
        save_last_run(path, when)
        assert load_last_run(path) == when.replace(microsecond=0)

    def test_corrupt_file_returns_none(self, tmp_path: Path):
        """Unreadable JSON is treated as no previous run."""
        path = tmp_path / "run_state.json"
        path.write_text("{not json")
        assert load_last_run(path) is None
