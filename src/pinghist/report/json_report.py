"""Machine-readable query output (JSON and CSV)."""

from __future__ import annotations

import csv
import json
from datetime import datetime, timedelta
from typing import IO, Any

from pinghist import __version__
from pinghist.metrics.ping_group import PingGroup
from pinghist.utils.helpers import utc_now_iso

CSV_FIELDS = [
    "start",
    "end",
    "received",
    "timedout",
    "min_time",
    "avg_time",
    "max_time",
    "std_dev",
    "total_time",
]


def build_json_report(
    address: str,
    start: datetime,
    end: datetime,
    group_by: timedelta,
    groups: list[PingGroup],
) -> dict[str, Any]:
    received = sum(g.received for g in groups)
    timedout = sum(g.timedout for g in groups)
    return {
        "tool": "pinghist",
        "version": __version__,
        "timestamp": utc_now_iso(),
        "address": address,
        "start": start.isoformat(),
        "end": end.isoformat(),
        "group_by_seconds": group_by.total_seconds(),
        "totals": {
            "received": received,
            "timedout": timedout,
            "loss_pct": round(timedout / (received + timedout) * 100, 2)
            if received + timedout
            else 0.0,
        },
        "groups": [g.to_dict() for g in groups],
    }


def write_json_report(f: IO[str], report: dict[str, Any]) -> None:
    json.dump(report, f, indent=2, default=str)
    f.write("\n")


def write_csv_groups(f: IO[str], groups: list[PingGroup]) -> None:
    """Write one CSV row per group."""
    writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
    writer.writeheader()
    for g in groups:
        row = g.to_dict()
        writer.writerow({k: row.get(k, "") for k in CSV_FIELDS})
