"""Structured logging and rich live progress display."""

from __future__ import annotations

import logging
import time

from rich.console import Console
from rich.live import Live
from rich.panel import Panel

from pinghist.utils.helpers import format_duration

console = Console()


def setup_logging(verbose: bool = False) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-7s | %(name)s | %(message)s",
        datefmt="%H:%M:%S",
    )


class LiveProgress:
    """Rich live display of the recording loop."""

    def __init__(self, host: str) -> None:
        self.host = host
        self.start_time = 0.0
        self.address = ""
        self.last_time: float | None = None
        self.received = 0
        self.timedout = 0
        self._live: Live | None = None

    def start(self) -> None:
        self.start_time = time.time()
        self._live = Live(self._render(), console=console, refresh_per_second=2)
        self._live.start()

    def update(
        self,
        address: str,
        last_time: float | None,
        received: int,
        timedout: int,
    ) -> None:
        self.address = address
        self.last_time = last_time
        self.received = received
        self.timedout = timedout
        if self._live:
            self._live.update(self._render())

    def stop(self) -> None:
        if self._live:
            self._live.stop()

    def _render(self) -> Panel:
        elapsed = time.time() - self.start_time if self.start_time else 0

        sent = self.received + self.timedout
        loss = self.timedout / sent * 100 if sent else 0.0
        last = f"{self.last_time:,.3f} ms" if self.last_time is not None else "timeout"
        if not sent:
            last = "-"

        lines = [
            f" Host: {self.host}  |  Address: {self.address or '-'}",
            f" Last: {last}",
            f" Received: {self.received:,}  |  Lost: {self.timedout:,} ({loss:.1f}%)",
            f" Elapsed: {format_duration(elapsed)}",
        ]

        return Panel(
            "\n".join(lines),
            title="[bold cyan]pinghist[/bold cyan]",
            border_style="cyan",
        )
