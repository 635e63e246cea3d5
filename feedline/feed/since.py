"""Parsing of the ``since`` display filter."""

import re
from datetime import datetime, timedelta, timezone
from email.utils import parsedate_to_datetime

_DURATION_UNITS = {
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
}
_DURATION_RE = re.compile(r"(\d+)([mhd])")

_DATETIME_FORMATS = [
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%d %H:%M",
    "%Y-%m-%d",
]


def parse_since(
    value: str,
    now: datetime,
    last_run: datetime | None = None,
) -> datetime | None:
    """Turn a ``since`` parameter into an absolute lower bound.

    Accepts ``"last"`` (the previous display run), a duration made of
    minutes/hours/days such as ``"1d12h"``, a date or datetime
    (``2024-01-01 12:03``, read as UTC), RFC 3339 or RFC 1123.

    Args:
        value: Raw parameter; empty means no bound.
        now: Reference time for durations.
        last_run: Time of the previous run, used by ``"last"``.

    Returns:
        The bound, or None when no filtering applies.

    Raises:
        ValueError: For anything that cannot be parsed.
    """
    value = value.strip()
    if not value:
        return None
    if value == "last":
        return last_run

    duration = parse_duration(value)
    if duration is not None:
        return now - duration
    return parse_datetime(value)


def parse_duration(value: str) -> timedelta | None:
    """Parse ``"90m"``, ``"2h"``, ``"1d12h"``; None if it is not a duration."""
    if not re.fullmatch(r"(\d+[mhd])+", value):
        return None
    total = timedelta()
    for amount, unit in _DURATION_RE.findall(value):
        total += int(amount) * _DURATION_UNITS[unit]
    return total


def parse_datetime(value: str) -> datetime:
    for fmt in _DATETIME_FORMATS:
        try:
            return datetime.strptime(value, fmt).replace(tzinfo=timezone.utc)
        except ValueError:
            continue
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        parsed = None
    if parsed is None:
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            raise ValueError(f"invalid datetime: {value!r}")
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
