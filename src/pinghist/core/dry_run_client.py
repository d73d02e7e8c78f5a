"""Simulated pinger for dry runs (no packets sent)."""

from __future__ import annotations

import asyncio
import random

from pinghist.core.ping_parser import PingResponse
from pinghist.errors import ProbeTimeoutError


class DryRunPinger:
    """Drop-in replacement for Pinger that makes up replies.

    Latencies are drawn uniformly from ``latency_range`` (milliseconds) and
    ``timeout_rate`` of the probes time out. ``delay`` seconds are slept per
    probe to mimic the round trip.
    """

    def __init__(
        self,
        address: str = "127.0.0.1",
        latency_range: tuple[float, float] = (5.0, 50.0),
        timeout_rate: float = 0.02,
        delay: float = 0.0,
        seed: int | None = None,
    ) -> None:
        self.address = address
        self.latency_range = latency_range
        self.timeout_rate = timeout_rate
        self.delay = delay
        self._rng = random.Random(seed)
        self._seq = 0

    async def ping(self, host: str) -> PingResponse:
        self._seq += 1
        if self.delay:
            await asyncio.sleep(self.delay)

        if self._rng.random() < self.timeout_rate:
            raise ProbeTimeoutError(self.address)

        return PingResponse(
            host=host,
            ip=self.address,
            ttl=64,
            time=round(self._rng.uniform(*self.latency_range), 3),
            icmp_seq=self._seq,
        )
