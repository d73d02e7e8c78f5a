"""Click CLI definition for pinghist."""

from __future__ import annotations

import asyncio
import logging
import sys
from datetime import datetime, timedelta
from typing import IO, NoReturn

import click
from pydantic import ValidationError
from rich.markup import escape

from pinghist import __version__
from pinghist.config import PinghistConfig, load_config
from pinghist.core.dry_run_client import DryRunPinger
from pinghist.core.pinger import Pinger
from pinghist.core.runner import PingRunner
from pinghist.errors import PinghistError
from pinghist.metrics.ping_group import PingGroup
from pinghist.report.json_report import build_json_report, write_csv_groups, write_json_report
from pinghist.report.table import TABLE_TIME_FORMAT, build_stats_table, write_table
from pinghist.storage.address_stats import sort_by_last_sample_time
from pinghist.storage.history import PingHistory
from pinghist.utils.helpers import default_range, parse_duration, parse_time
from pinghist.utils.logging import console, setup_logging

logger = logging.getLogger(__name__)

EXAMPLES = """\
Record one ping per second to a host (Ctrl-C to stop):
  pinghist ping 8.8.8.8

Last hour of the most recently pinged address, 10 minute groups:
  pinghist query

Since 9 am today, grouped by hour:
  pinghist query --ip 8.8.8.8 --start "9:00 am" --group-by 1h

A specific window as JSON:
  pinghist query --ip 8.8.8.8 --start "01/02 15:04" --end "01/02 18:00" --format json
"""


def _open_history(config: PinghistConfig) -> PingHistory:
    history = PingHistory(config.store)
    history.create_schema()
    return history


def _fail(message: str) -> NoReturn:
    console.print(f"[red]Error:[/red] {escape(message)}")
    sys.exit(1)


def _load_config(config_path: str | None, overrides: dict) -> PinghistConfig:
    try:
        return load_config(config_path, overrides)
    except ValidationError as e:
        _fail(f"Invalid configuration\n{e}")


@click.group()
@click.version_option(version=__version__)
def main() -> None:
    """pinghist: ping latency history."""


@main.command()
@click.argument("host")
@click.option("--interval", type=float, help="Seconds between pings")
@click.option("--timeout", type=float, help="Seconds to wait for each reply")
@click.option("--count", type=int, help="Stop after this many pings")
@click.option("--dry-run", is_flag=True, help="Simulate replies instead of pinging")
@click.option("--db", "db_path", type=str, help="Path to the history file")
@click.option("--config", "config_path", type=str, help="Path to config YAML file")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def ping(
    host: str,
    interval: float | None,
    timeout: float | None,
    count: int | None,
    dry_run: bool,
    db_path: str | None,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Ping HOST once per interval and record every reply."""
    setup_logging(verbose)

    overrides: dict = {}
    if interval is not None:
        overrides.setdefault("probe", {})["interval_seconds"] = interval
    if timeout is not None:
        overrides.setdefault("probe", {})["timeout_seconds"] = timeout
    if db_path:
        overrides.setdefault("store", {})["path"] = db_path

    config = _load_config(config_path, overrides)

    if dry_run:
        pinger = DryRunPinger(address=host)
    else:
        pinger = Pinger(config.probe.ping_command, config.probe.timeout_seconds)

    console.print(
        f"\n[bold cyan]pinghist[/bold cyan] v{__version__}\n"
        f"  Host:      {host}\n"
        f"  Interval:  {config.probe.interval_seconds}s\n"
        f"  Store:     {config.store.path}\n"
    )

    try:
        with _open_history(config) as history:
            runner = PingRunner(config, history, pinger, host, show_progress=True)
            try:
                asyncio.run(runner.run(max_ticks=count))
            except KeyboardInterrupt:
                console.print("\n[yellow]Stopped[/yellow]")
    except PinghistError as e:
        _fail(str(e))

    console.print(
        f"\n  Received: {runner.received:,}  |  Lost: {runner.timedout:,}\n"
    )


@main.command()
@click.option("--ip", type=str, help="Address to query (default: most recently pinged)")
@click.option("--start", "-s", type=str, help="Start time, e.g. '9:00 am' or '01/02 15:04'")
@click.option("--end", "-e", type=str, help="End time (default: now)")
@click.option("--group-by", "-g", type=str, help="Group duration: (s)econds, (m)inutes, (h)ours")
@click.option("--format", "output_format", type=click.Choice(["table", "json", "csv"]))
@click.option("--output", "output_path", type=str, help="Write JSON/CSV here instead of stdout")
@click.option("--db", "db_path", type=str, help="Path to the history file")
@click.option("--config", "config_path", type=str, help="Path to config YAML file")
@click.option("--verbose", is_flag=True, help="Enable debug logging")
def query(
    ip: str | None,
    start: str | None,
    end: str | None,
    group_by: str | None,
    output_format: str | None,
    output_path: str | None,
    db_path: str | None,
    config_path: str | None,
    verbose: bool,
) -> None:
    """Summarize recorded pings into groups."""
    setup_logging(verbose)

    overrides: dict = {}
    if group_by:
        overrides.setdefault("query", {})["group_by"] = group_by
    if output_format:
        overrides.setdefault("output", {})["format"] = output_format
    if output_path:
        overrides.setdefault("output", {})["path"] = output_path
    if db_path:
        overrides.setdefault("store", {})["path"] = db_path

    config = _load_config(config_path, overrides)

    try:
        dur = parse_duration(config.query.group_by)
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--group-by") from e

    now = datetime.now().astimezone()
    st, et = default_range(now, timedelta(minutes=config.query.lookback_minutes))
    try:
        if start:
            st = parse_time(start, now)
        if end:
            et = parse_time(end, now)
    except ValueError as e:
        raise click.BadParameter(str(e)) from e

    try:
        with _open_history(config) as history:
            address = ip or history.most_recently_active()
            if not address:
                _fail("Nothing recorded yet, run `pinghist ping HOST` first")
            groups = history.query(address, st, et, dur)
    except PinghistError as e:
        _fail(str(e))

    fmt = config.output.format
    if fmt == "table":
        title = (
            f"Results for {address}, from {st.strftime(TABLE_TIME_FORMAT).lower()}, "
            f"to {et.strftime(TABLE_TIME_FORMAT).lower()}, grouped by {config.query.group_by}"
        )
        write_table(console, groups, title=title)
        return

    if config.output.path:
        with open(config.output.path, "w", newline="") as f:
            _write_machine_output(f, fmt, address, st, et, dur, groups)
        logger.info("Wrote %s report: %s", fmt, config.output.path)
    else:
        _write_machine_output(sys.stdout, fmt, address, st, et, dur, groups)


def _write_machine_output(
    f: IO[str],
    fmt: str,
    address: str,
    start: datetime,
    end: datetime,
    dur: timedelta,
    groups: list[PingGroup],
) -> None:
    if fmt == "json":
        write_json_report(f, build_json_report(address, start, end, dur, groups))
    else:
        write_csv_groups(f, groups)


@main.command()
@click.option("--db", "db_path", type=str, help="Path to the history file")
@click.option("--config", "config_path", type=str, help="Path to config YAML file")
def hosts(db_path: str | None, config_path: str | None) -> None:
    """List every recorded address, most recently active last."""
    setup_logging(False)
    overrides: dict = {}
    if db_path:
        overrides.setdefault("store", {})["path"] = db_path
    config = _load_config(config_path, overrides)

    try:
        with _open_history(config) as history:
            stats = sort_by_last_sample_time(history.get_all_address_stats())
    except PinghistError as e:
        _fail(str(e))

    if not stats:
        console.print("No addresses recorded yet")
        return
    console.print(build_stats_table(stats))


@main.command()
def examples() -> None:
    """Show example usage."""
    console.print(EXAMPLES, highlight=False)


if __name__ == "__main__":
    main()
