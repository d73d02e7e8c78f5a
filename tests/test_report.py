"""Tests for query result output."""

import csv
import io
import json
from datetime import datetime, timedelta, timezone

from rich.console import Console

from pinghist.metrics.grouper import group_samples
from pinghist.report.json_report import (
    CSV_FIELDS,
    build_json_report,
    write_csv_groups,
    write_json_report,
)
from pinghist.report.table import build_stats_table, write_table
from pinghist.storage.address_stats import upsert_on_write
from pinghist.storage.codec import TIMEOUT

START = datetime(2015, 1, 1, 12, 0, tzinfo=timezone.utc)
END = START + timedelta(minutes=20)


def _groups():
    samples = [
        (START + timedelta(seconds=1), 10.0),
        (START + timedelta(seconds=2), 20.0),
        (START + timedelta(seconds=3), TIMEOUT),
        (START + timedelta(minutes=11), 30.0),
    ]
    return group_samples(samples, START, END, timedelta(minutes=10))


def test_json_report():
    groups = _groups()
    report = build_json_report("10.0.0.1", START, END, timedelta(minutes=10), groups)

    assert report["tool"] == "pinghist"
    assert report["address"] == "10.0.0.1"
    assert report["group_by_seconds"] == 600.0
    assert report["totals"] == {"received": 3, "timedout": 1, "loss_pct": 25.0}
    assert len(report["groups"]) == 2
    assert report["groups"][0]["avg_time"] == 15.0

    buf = io.StringIO()
    write_json_report(buf, report)
    loaded = json.loads(buf.getvalue())
    assert loaded["start"] == START.isoformat()
    assert loaded["groups"][1]["received"] == 1


def test_json_report_no_samples():
    groups = group_samples([], START, END, timedelta(minutes=10))
    report = build_json_report("10.0.0.1", START, END, timedelta(minutes=10), groups)
    assert report["totals"] == {"received": 0, "timedout": 0, "loss_pct": 0.0}


def test_csv_groups():
    buf = io.StringIO()
    write_csv_groups(buf, _groups())
    rows = list(csv.DictReader(io.StringIO(buf.getvalue())))

    assert list(rows[0].keys()) == CSV_FIELDS
    assert len(rows) == 2
    assert rows[0]["received"] == "2"
    assert rows[0]["timedout"] == "1"
    assert float(rows[1]["max_time"]) == 30.0


def test_write_table():
    console = Console(file=io.StringIO(), width=120)
    write_table(console, _groups(), title="Results for 10.0.0.1")
    out = console.file.getvalue()
    assert "Results for 10.0.0.1" in out
    assert "15 ms" in out
    assert "Lost" in out


def test_stats_table():
    stats = [upsert_on_write(None, "10.0.0.1", START)]
    console = Console(file=io.StringIO(), width=120)
    console.print(build_stats_table(stats))
    assert "10.0.0.1" in console.file.getvalue()
