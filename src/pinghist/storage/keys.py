"""Per-address, per-minute storage keys.

A key is ``"<address>_<RFC3339 minute start>"`` encoded as UTF-8, e.g.
``b"127.0.0.1_2015-01-01T12:30:00Z"``. Every sample taken in the same
calendar minute for the same address shares one key, and all keys of one
address sort together in chronological order (for a fixed UTC offset).

RFC3339 text never contains ``_``, so keys are split on the last separator
and addresses are free to contain ``_`` themselves.
"""

from __future__ import annotations

import re
from datetime import datetime, timedelta

from pinghist.errors import InvalidKeyError, KeyTimestampParsingError

SEPARATOR = "_"

_RFC3339 = re.compile(
    r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?(Z|[+-]\d{2}:\d{2})$"
)


def ensure_aware(timestamp: datetime) -> datetime:
    """Naive datetimes are taken to be local time."""
    if timestamp.tzinfo is None or timestamp.utcoffset() is None:
        return timestamp.astimezone()
    return timestamp


def to_local(timestamp: datetime) -> datetime:
    """Convert to the local zone, the zone history keys are written in."""
    return ensure_aware(timestamp).astimezone()


def truncate_to_minute(timestamp: datetime) -> datetime:
    return timestamp.replace(second=0, microsecond=0)


def truncate_to_second(timestamp: datetime) -> datetime:
    return timestamp.replace(microsecond=0)


def format_rfc3339(timestamp: datetime) -> str:
    """Format with second precision, ``Z`` for UTC and ``+hh:mm`` otherwise."""
    timestamp = ensure_aware(timestamp)
    base = timestamp.strftime("%Y-%m-%dT%H:%M:%S")
    offset = timestamp.utcoffset()
    if not offset:
        return f"{base}Z"

    total = int(offset / timedelta(minutes=1))
    sign = "+" if total >= 0 else "-"
    hours, minutes = divmod(abs(total), 60)
    return f"{base}{sign}{hours:02d}:{minutes:02d}"


def parse_rfc3339(text: str) -> datetime:
    if not _RFC3339.match(text):
        raise ValueError(f"not an RFC3339 timestamp: {text!r}")
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    return datetime.fromisoformat(text)


def key_prefix(address: str) -> bytes:
    """Prefix shared by every key of ``address`` and no other address's keys."""
    return f"{address}{SEPARATOR}".encode("utf-8")


def make_key(address: str, timestamp: datetime) -> bytes:
    minute = truncate_to_minute(ensure_aware(timestamp))
    return f"{address}{SEPARATOR}{format_rfc3339(minute)}".encode("utf-8")


def parse_key(key: bytes) -> tuple[str, datetime]:
    """Split a storage key back into ``(address, minute_start)``."""
    try:
        text = bytes(key).decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidKeyError(key) from e

    address, sep, stamp = text.rpartition(SEPARATOR)
    if not sep or not address or not stamp:
        raise InvalidKeyError(key)

    try:
        minute_start = parse_rfc3339(stamp)
    except ValueError as e:
        raise KeyTimestampParsingError(key, str(e)) from e
    return address, minute_start
