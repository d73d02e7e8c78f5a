"""Shared fixtures: a throwaway history file per test, pinned local zone."""

import time
from datetime import datetime, timezone

import pytest

from pinghist.config import StoreConfig
from pinghist.storage.history import PingHistory


@pytest.fixture
def local_tz(monkeypatch):
    """Switch the process local zone, e.g. ``local_tz("Europe/Berlin")``."""

    def _set(name: str) -> None:
        monkeypatch.setenv("TZ", name)
        time.tzset()

    yield _set
    monkeypatch.undo()
    time.tzset()


@pytest.fixture(autouse=True)
def utc_local_zone(local_tz):
    local_tz("UTC")


@pytest.fixture
def store_config(tmp_path) -> StoreConfig:
    return StoreConfig(path=str(tmp_path / "pinghist.db"), map_size=64 << 20, sync=False)


@pytest.fixture
def history(store_config):
    h = PingHistory(store_config)
    h.create_schema()
    yield h
    h.close()


@pytest.fixture
def base_time() -> datetime:
    return datetime(2015, 1, 1, 12, 30, 0, tzinfo=timezone.utc)
