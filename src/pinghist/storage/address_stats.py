"""Per-address summary record used to pick a default address cheaply."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ValidationError

from pinghist.errors import AddressStatsDeserializationError
from pinghist.storage.keys import make_key


class AddressStats(BaseModel):
    address: str
    first_sample_key: str  # first key of the pings bucket
    last_sample_key: str  # last key ...
    first_sample_time: datetime
    last_sample_time: datetime

    def to_bytes(self) -> bytes:
        return self.model_dump_json().encode("utf-8")

    @classmethod
    def from_bytes(cls, data: bytes) -> "AddressStats":
        try:
            return cls.model_validate_json(data)
        except ValidationError as e:
            raise AddressStatsDeserializationError(
                f"Could not deserialize address stats: {e.error_count()} error(s)"
            ) from e


def upsert_on_write(
    existing: AddressStats | None,
    address: str,
    timestamp: datetime,
) -> AddressStats:
    """Return the stats record after a sample for ``address`` at ``timestamp``."""
    key = make_key(address, timestamp).decode("utf-8")
    if existing is None:
        return AddressStats(
            address=address,
            first_sample_key=key,
            last_sample_key=key,
            first_sample_time=timestamp,
            last_sample_time=timestamp,
        )
    return existing.model_copy(
        update={"last_sample_key": key, "last_sample_time": timestamp}
    )


def sort_by_last_sample_time(stats: list[AddressStats]) -> list[AddressStats]:
    """Stable ascending sort, ties keep their enumeration order."""
    return sorted(stats, key=lambda s: s.last_sample_time)


def most_recently_active(stats: list[AddressStats]) -> AddressStats | None:
    if not stats:
        return None
    return sort_by_last_sample_time(stats)[-1]
