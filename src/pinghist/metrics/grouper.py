"""Fold a time-ordered sample stream into gap-free fixed-width groups."""

from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Iterable

from pinghist.errors import InvalidRangeError
from pinghist.metrics.ping_group import PingGroup

logger = logging.getLogger(__name__)


def group_samples(
    samples: Iterable[tuple[datetime, float]],
    start: datetime,
    end: datetime,
    bucket: timedelta,
) -> list[PingGroup]:
    """Summarize ``(timestamp, res_time)`` samples into windows of ``bucket``.

    Windows start at ``start + n * bucket`` and together tile ``[start, end)``
    exactly: every window appears once, including empty ones, and the last
    one is cut off at ``end``. Samples must arrive in ascending time order;
    anything before the current window is skipped and the stream is
    abandoned at the first sample at or past ``end``.

    If ``samples`` raises, the error propagates and no groups are returned.
    """
    if bucket <= timedelta(0):
        raise InvalidRangeError(f"Group duration must be positive, got {bucket}")
    if end <= start:
        raise InvalidRangeError(f"Range end {end} must be after start {start}")

    groups: list[PingGroup] = []
    current = PingGroup(start=start, end=start + bucket)
    skipped = 0

    for timestamp, res_time in samples:
        if timestamp >= end:
            break
        if timestamp < current.start:
            skipped += 1
            continue

        # Bounded: the sample is < end
        while timestamp >= current.end:
            current.finalize()
            groups.append(current)
            current = PingGroup(start=current.end, end=current.end + bucket)

        current.add_res_time(res_time)

    # Trailing windows with no data
    while current.end < end:
        current.finalize()
        groups.append(current)
        current = PingGroup(start=current.end, end=current.end + bucket)

    current.end = min(current.end, end)
    current.finalize()
    groups.append(current)

    if skipped:
        logger.debug("Skipped %d samples outside the current window", skipped)
    return groups
