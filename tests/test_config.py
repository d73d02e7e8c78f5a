"""Tests for config loading."""

import pytest
from pydantic import ValidationError

from pinghist.config import PinghistConfig, StoreConfig, load_config


def test_defaults():
    config = load_config()
    assert config.store.path == "pinghist.db"
    assert config.store.buckets == ["pings_by_minute", "ip_stats"]
    assert config.probe.interval_seconds == 1.0
    assert config.query.group_by == "10m"
    assert config.output.format == "table"


def test_load_yaml(tmp_path):
    path = tmp_path / "pinghist.yaml"
    path.write_text(
        "store:\n"
        "  path: /tmp/other.db\n"
        "probe:\n"
        "  interval_seconds: 5\n"
        "query:\n"
        "  group_by: 1h\n"
    )
    config = load_config(str(path))
    assert config.store.path == "/tmp/other.db"
    assert config.store.pings_bucket == "pings_by_minute"
    assert config.probe.interval_seconds == 5.0
    assert config.query.group_by == "1h"


def test_overrides_win_over_file(tmp_path):
    path = tmp_path / "pinghist.yaml"
    path.write_text("probe:\n  interval_seconds: 5\n  timeout_seconds: 2\n")
    config = load_config(str(path), {"probe": {"interval_seconds": 0.5, "timeout_seconds": None}})
    assert config.probe.interval_seconds == 0.5
    assert config.probe.timeout_seconds == 2.0


def test_missing_file_uses_defaults(tmp_path):
    config = load_config(str(tmp_path / "nope.yaml"))
    assert config == PinghistConfig()


def test_empty_file(tmp_path):
    path = tmp_path / "empty.yaml"
    path.write_text("")
    assert load_config(str(path)) == PinghistConfig()


def test_buckets_must_differ():
    with pytest.raises(ValidationError):
        StoreConfig(pings_bucket="same", stats_bucket="same")


def test_bucket_names_not_empty():
    with pytest.raises(ValidationError):
        StoreConfig(stats_bucket="")


def test_bad_output_format():
    with pytest.raises(ValidationError):
        load_config(None, {"output": {"format": "xml"}})


def test_interval_must_be_positive():
    with pytest.raises(ValidationError):
        load_config(None, {"probe": {"interval_seconds": 0}})
