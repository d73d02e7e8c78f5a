"""Terminal tables for query results and address stats."""

from __future__ import annotations

from rich.console import Console
from rich.table import Table

from pinghist.metrics.ping_group import PingGroup
from pinghist.storage.address_stats import AddressStats

TABLE_TIME_FORMAT = "%m/%d %I:%M %p"


def _ms(value: float) -> str:
    return f"{value:.0f} ms"


def build_groups_table(groups: list[PingGroup], title: str | None = None) -> Table:
    table = Table(title=title, box=None, header_style="bold")
    table.add_column("Time", justify="right")
    for name in ("min", "avg", "max", "std dev", "Received", "Lost"):
        table.add_column(name, justify="right")

    for g in groups:
        table.add_row(
            g.start.astimezone().strftime(TABLE_TIME_FORMAT).lower(),
            _ms(g.min_time),
            _ms(g.avg_time),
            _ms(g.max_time),
            _ms(g.std_dev),
            f"{g.received:,}",
            f"{g.timedout:,}",
        )
    return table


def build_stats_table(stats: list[AddressStats]) -> Table:
    table = Table(box=None, header_style="bold")
    table.add_column("Address")
    table.add_column("First sample", justify="right")
    table.add_column("Last sample", justify="right")

    for s in stats:
        table.add_row(
            s.address,
            s.first_sample_time.astimezone().strftime(TABLE_TIME_FORMAT).lower(),
            s.last_sample_time.astimezone().strftime(TABLE_TIME_FORMAT).lower(),
        )
    return table


def write_table(console: Console, groups: list[PingGroup], title: str | None = None) -> None:
    console.print(build_groups_table(groups, title=title))
