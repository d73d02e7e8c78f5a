"""Tests for the recording loop (simulated probes only)."""

from datetime import datetime, timedelta

import pytest

from pinghist.config import PinghistConfig, ProbeConfig
from pinghist.core.dry_run_client import DryRunPinger
from pinghist.core.ping_parser import PingResponse
from pinghist.core.runner import PingRunner
from pinghist.errors import ProbeTimeoutError


class FlakyPinger:
    """Every other probe times out."""

    def __init__(self, address: str) -> None:
        self.address = address
        self.calls = 0

    async def ping(self, host: str) -> PingResponse:
        self.calls += 1
        if self.calls % 2 == 0:
            raise ProbeTimeoutError(self.address)
        return PingResponse(host=host, ip=self.address, time=12.5, icmp_seq=self.calls)


def _config(store_config) -> PinghistConfig:
    return PinghistConfig(store=store_config, probe=ProbeConfig(interval_seconds=0.01))


def _query_around_now(history, address):
    now = datetime.now().astimezone()
    return history.query(
        address, now - timedelta(minutes=5), now + timedelta(minutes=5), timedelta(minutes=10)
    )


@pytest.mark.asyncio
async def test_run_records_every_probe(history, store_config):
    runner = PingRunner(
        _config(store_config), history, DryRunPinger(address="10.0.0.1", timeout_rate=0.0, seed=1), "10.0.0.1"
    )
    ticks = await runner.run(max_ticks=5)

    assert ticks == 5
    assert runner.received == 5
    assert runner.timedout == 0
    assert runner.last_address == "10.0.0.1"

    groups = _query_around_now(history, "10.0.0.1")
    assert sum(g.received for g in groups) == 5
    assert history.most_recently_active() == "10.0.0.1"


@pytest.mark.asyncio
async def test_timeouts_are_stored(history, store_config):
    runner = PingRunner(_config(store_config), history, FlakyPinger("10.0.0.2"), "gateway")
    await runner.run(max_ticks=4)

    assert runner.received == 2
    assert runner.timedout == 2

    groups = _query_around_now(history, "10.0.0.2")
    assert sum(g.received for g in groups) == 2
    assert sum(g.timedout for g in groups) == 2
    (g,) = [g for g in groups if g.received]
    assert g.avg_time == pytest.approx(12.5)


@pytest.mark.asyncio
async def test_tick_stores_under_resolved_address(history, store_config):
    runner = PingRunner(_config(store_config), history, FlakyPinger("93.184.216.34"), "example.com")
    await runner.tick()

    assert runner.last_address == "93.184.216.34"
    assert runner.last_time == pytest.approx(12.5)
    assert history.get_address_stats("93.184.216.34") is not None
    assert history.get_address_stats("example.com") is None


@pytest.mark.asyncio
async def test_dry_run_pinger_is_deterministic():
    a = DryRunPinger(seed=7, timeout_rate=0.0)
    b = DryRunPinger(seed=7, timeout_rate=0.0)
    times_a = [(await a.ping("h")).time for _ in range(5)]
    times_b = [(await b.ping("h")).time for _ in range(5)]
    assert times_a == times_b
    assert all(5.0 <= t <= 50.0 for t in times_a)


@pytest.mark.asyncio
async def test_dry_run_pinger_always_times_out():
    p = DryRunPinger(address="10.9.9.9", timeout_rate=1.0)
    with pytest.raises(ProbeTimeoutError) as exc_info:
        await p.ping("h")
    assert exc_info.value.address == "10.9.9.9"
