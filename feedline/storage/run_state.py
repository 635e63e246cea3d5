"""Last-run bookkeeping used by ``since=last``."""

import json
from datetime import datetime
from pathlib import Path

from feedline.storage.files import atomic_write_bytes, from_unix, to_unix


def load_last_run(state_path: str | Path) -> datetime | None:
    """Load the time of the previous display run.

    Args:
        state_path: Path to the run state JSON file.

    Returns:
        The last run time, or None if no usable state exists.
    """
    path = Path(state_path)
    if not path.exists():
        return None
    try:
        data = json.loads(path.read_text())
    except json.JSONDecodeError:
        return None
    timestamp = data.get("last_run_timestamp")
    if not isinstance(timestamp, int):
        return None
    return from_unix(timestamp)


def save_last_run(state_path: str | Path, when: datetime) -> None:
    """Save the time of the current display run.

    Args:
        state_path: Path to the run state JSON file.
        when: The run time to record.
    """
    payload = json.dumps({"last_run_timestamp": to_unix(when)}, indent=2)
    atomic_write_bytes(Path(state_path), payload.encode())
