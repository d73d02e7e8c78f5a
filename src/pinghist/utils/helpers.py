"""Time-string parsing and formatting helpers."""

from __future__ import annotations

import re
from datetime import datetime, timedelta, timezone

from pinghist.storage.keys import parse_rfc3339

# Formats accepted on the command line; "%m" and "%d" also take one digit
_DATE_TIME_FORMATS = [
    "%m/%d %I:%M %p",
    "%m/%d %H:%M",
]
_TIME_FORMATS = [
    "%I:%M %p",
    "%H:%M",
]

_DURATION_PART = re.compile(r"(\d+(?:\.\d*)?|\.\d+)(h|m|s)")
_UNIT_SECONDS = {"h": 3600, "m": 60, "s": 1}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds")


def format_duration(seconds: float) -> str:
    m, s = divmod(int(seconds), 60)
    h, m = divmod(m, 60)
    if h:
        return f"{h}h {m}m {s}s"
    return f"{m}m {s}s"


def parse_time(text: str, now: datetime | None = None) -> datetime:
    """Parse a user supplied time into an aware local datetime.

    Accepts ``01/02 03:04 pm``, ``1/2 15:04``, ``3:04 pm``, ``15:04`` and
    RFC3339. A missing date means today, a missing year the current year.
    """
    now = (now or datetime.now()).astimezone()
    text = text.strip()

    for fmt in _TIME_FORMATS:
        try:
            parsed = datetime.strptime(text, fmt)
        except ValueError:
            continue
        return now.replace(
            hour=parsed.hour, minute=parsed.minute, second=0, microsecond=0
        )

    for fmt in _DATE_TIME_FORMATS:
        try:
            parsed = datetime.strptime(f"{now.year}/{text}", f"%Y/{fmt}")
        except ValueError:
            continue
        return parsed.astimezone()

    try:
        return parse_rfc3339(text).astimezone()
    except ValueError:
        pass
    raise ValueError(f"Can't parse time: {text!r}")


def parse_duration(text: str) -> timedelta:
    """Parse a Go style duration such as ``1h``, ``10m``, ``1h30m`` or ``1.5h``."""
    text = text.strip()
    if not text:
        raise ValueError("Empty duration")

    total = 0.0
    pos = 0
    for match in _DURATION_PART.finditer(text):
        if match.start() != pos:
            break
        total += float(match.group(1)) * _UNIT_SECONDS[match.group(2)]
        pos = match.end()

    if pos != len(text):
        raise ValueError(f"Can't parse duration: {text!r}")
    return timedelta(seconds=total)


def default_range(now: datetime, lookback: timedelta) -> tuple[datetime, datetime]:
    """Start ``lookback`` ago, rounded down to the 10 minute mark; end now."""
    t = now - lookback
    start = t.replace(minute=t.minute // 10 * 10, second=0, microsecond=0)
    return start, now
