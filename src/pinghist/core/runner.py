"""Recording loop: probe the host once per tick and store the result."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime
from typing import Protocol

from pinghist.config import PinghistConfig
from pinghist.core.ping_parser import PingResponse
from pinghist.errors import ProbeTimeoutError
from pinghist.storage.codec import TIMEOUT
from pinghist.storage.history import PingHistory
from pinghist.utils.logging import LiveProgress

logger = logging.getLogger(__name__)


class Probe(Protocol):
    async def ping(self, host: str) -> PingResponse: ...


class PingRunner:
    """Pings ``host`` every ``probe.interval_seconds`` and saves each sample."""

    def __init__(
        self,
        config: PinghistConfig,
        history: PingHistory,
        pinger: Probe,
        host: str,
        show_progress: bool = False,
    ) -> None:
        self.config = config
        self.history = history
        self.pinger = pinger
        self.host = host
        self.show_progress = show_progress
        self.received = 0
        self.timedout = 0
        self.last_address = ""
        self.last_time: float | None = None

    async def run(self, max_ticks: int | None = None) -> int:
        """Probe until cancelled (or ``max_ticks`` probes). Returns probes made."""
        interval = self.config.probe.interval_seconds
        loop = asyncio.get_running_loop()
        progress = LiveProgress(self.host) if self.show_progress else None
        if progress:
            progress.start()

        ticks = 0
        next_tick = loop.time()
        try:
            while max_ticks is None or ticks < max_ticks:
                await self.tick()
                ticks += 1
                if progress:
                    progress.update(
                        address=self.last_address,
                        last_time=self.last_time,
                        received=self.received,
                        timedout=self.timedout,
                    )

                if max_ticks is not None and ticks >= max_ticks:
                    break
                next_tick += interval
                await asyncio.sleep(max(0.0, next_tick - loop.time()))
        finally:
            if progress:
                progress.stop()

        logger.info(
            "Recorded %d probes for %s: %d received, %d timed out",
            ticks,
            self.host,
            self.received,
            self.timedout,
        )
        return ticks

    async def tick(self) -> None:
        """Probe once and save the reply latency, or a timeout."""
        start_time = datetime.now().astimezone()
        try:
            response = await self.pinger.ping(self.host)
        except ProbeTimeoutError as e:
            logger.debug("%s", e)
            self.history.save(e.address, start_time, TIMEOUT)
            self.timedout += 1
            self.last_address = e.address
            self.last_time = None
            return

        address = response.ip or self.host
        self.history.save(address, start_time, response.time)
        self.received += 1
        self.last_address = address
        self.last_time = response.time
        logger.debug("%s: %.3f ms", address, response.time)
