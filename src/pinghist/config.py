"""Configuration loading: YAML file + CLI overrides, validated with pydantic."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator


class StoreConfig(BaseModel):
    path: str = "pinghist.db"
    pings_bucket: str = "pings_by_minute"
    stats_bucket: str = "ip_stats"
    map_size: int = Field(default=1 << 30, ge=1 << 20)
    sync: bool = True

    @model_validator(mode="after")
    def buckets_are_distinct(self) -> "StoreConfig":
        if not self.pings_bucket or not self.stats_bucket:
            raise ValueError("Bucket names can't be empty")
        if self.pings_bucket == self.stats_bucket:
            raise ValueError(
                f"pings_bucket and stats_bucket must differ, both are {self.pings_bucket!r}"
            )
        return self

    @property
    def buckets(self) -> list[str]:
        return [self.pings_bucket, self.stats_bucket]


class ProbeConfig(BaseModel):
    interval_seconds: float = Field(default=1.0, gt=0)
    timeout_seconds: float = Field(default=3.0, gt=0)
    ping_command: str = "ping"


class QueryConfig(BaseModel):
    group_by: str = "10m"
    lookback_minutes: int = Field(default=60, ge=1)


class OutputConfig(BaseModel):
    format: str = Field(default="table", pattern="^(table|json|csv)$")
    path: str = ""


class PinghistConfig(BaseModel):
    store: StoreConfig = StoreConfig()
    probe: ProbeConfig = ProbeConfig()
    query: QueryConfig = QueryConfig()
    output: OutputConfig = OutputConfig()


def load_config(
    config_path: str | None = None,
    cli_overrides: dict[str, Any] | None = None,
) -> PinghistConfig:
    """Load config from YAML file, then apply CLI overrides."""
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

    if cli_overrides:
        _deep_merge(data, cli_overrides)

    return PinghistConfig(**data)


def _deep_merge(base: dict, override: dict) -> None:
    """Merge override dict into base dict recursively (in-place)."""
    for key, value in override.items():
        if value is None:
            continue
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
