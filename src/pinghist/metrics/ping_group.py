"""PingGroup dataclass: summary of the samples inside one time window."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from datetime import datetime


@dataclass
class PingGroup:
    """Accumulates ping samples for the half-open window ``[start, end)``."""

    start: datetime
    end: datetime

    received: int = 0  # ping packets received
    timedout: int = 0  # ping packets timed out

    # Milliseconds
    total_time: float = 0.0  # sum of all received response times
    avg_time: float = 0.0  # total_time / received
    std_dev: float = 0.0  # population std dev of received response times
    min_time: float = 0.0
    max_time: float = 0.0

    # Raw response times for std dev, None once finalized
    res_times: list[float] | None = field(default_factory=list, repr=False)

    @property
    def finalized(self) -> bool:
        return self.res_times is None

    def add_res_time(self, res_time: float) -> None:
        """Fold one response time in; negative values count as timeouts."""
        if res_time >= 0:
            self.received += 1
            self.total_time += res_time
            if self.received == 1 or res_time < self.min_time:
                self.min_time = res_time
            if self.received == 1 or res_time > self.max_time:
                self.max_time = res_time
            if self.res_times is not None:
                self.res_times.append(res_time)
        else:
            self.timedout += 1

    def finalize(self) -> None:
        """Compute avg and population std dev, then free the raw buffer."""
        if self.res_times is None:
            return

        if self.received == 0:
            self.avg_time = 0.0
            self.std_dev = 0.0
        else:
            avg = self.total_time / self.received
            sum_diff_sq = sum((t - avg) ** 2 for t in self.res_times)
            self.avg_time = avg
            self.std_dev = math.sqrt(sum_diff_sq / self.received)
        self.res_times = None

    def to_dict(self) -> dict:
        return {
            "start": self.start.isoformat(),
            "end": self.end.isoformat(),
            "received": self.received,
            "timedout": self.timedout,
            "total_time": self.total_time,
            "avg_time": self.avg_time,
            "std_dev": self.std_dev,
            "min_time": self.min_time,
            "max_time": self.max_time,
        }
