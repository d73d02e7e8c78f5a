"""Ping history: the read/write path for samples and address stats.

Samples are keyed by address and minute (see ``keys``), so each key holds at
most 60 samples at one ping per second. A key's value is the flat
concatenation of 7-byte records (see ``codec``), appended to as samples
arrive and never rewritten.

Timestamps are converted to the local zone before keys are built, for
writes and query bounds alike, so the offset a caller uses does not matter.
"""

from __future__ import annotations

import logging
import math
from contextlib import closing
from datetime import datetime, timedelta
from typing import Generator, Iterable

import lmdb

from pinghist.config import StoreConfig
from pinghist.errors import (
    InvalidKeyError,
    IPRequiredError,
    KeyTimestampParsingError,
    ResponseTimeOutOfRangeError,
)
from pinghist.metrics.grouper import group_samples
from pinghist.metrics.ping_group import PingGroup
from pinghist.storage.address_stats import (
    AddressStats,
    most_recently_active,
    upsert_on_write,
)
from pinghist.storage.codec import TIMEOUT, encode_sample, iter_records
from pinghist.storage.keys import (
    key_prefix,
    make_key,
    parse_key,
    to_local,
    truncate_to_second,
)
from pinghist.storage.store import Store

logger = logging.getLogger(__name__)


def _validate_sample(address: str, response_time: float) -> None:
    if not address:
        raise IPRequiredError()
    if math.isnan(response_time) or response_time < TIMEOUT:
        raise ResponseTimeOutOfRangeError(response_time)


class PingHistory:
    """Data access layer over one store file."""

    def __init__(self, config: StoreConfig | None = None) -> None:
        self.config = config or StoreConfig()
        self.store = Store(self.config)

    def __enter__(self) -> "PingHistory":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def close(self) -> None:
        self.store.close()

    # Schema

    def create_schema(self) -> None:
        self.store.create_buckets(self.config.buckets)

    def drop_schema(self) -> None:
        self.store.delete_buckets(self.config.buckets)

    # Writes

    def save(self, address: str, timestamp: datetime, response_time: float) -> None:
        """Save one sample and update the address stats atomically."""
        _validate_sample(address, response_time)
        timestamp = to_local(timestamp)

        with self.store.update() as txn:
            self._record(txn, address, timestamp, response_time)

    def save_many(
        self,
        address: str,
        samples: Iterable[tuple[datetime, float]],
    ) -> int:
        """Save a batch of samples for one address in a single transaction."""
        if not address:
            raise IPRequiredError()

        count = 0
        with self.store.update() as txn:
            for timestamp, response_time in samples:
                _validate_sample(address, response_time)
                self._record(txn, address, to_local(timestamp), response_time)
                count += 1
        logger.debug("Saved %d samples for %s", count, address)
        return count

    def _record(
        self,
        txn: lmdb.Transaction,
        address: str,
        timestamp: datetime,
        response_time: float,
    ) -> None:
        stats_db = self.store.bucket(txn, self.config.stats_bucket)
        existing = self._get_stats(txn, stats_db, address)
        stats = upsert_on_write(existing, address, timestamp)
        txn.put(address.encode("utf-8"), stats.to_bytes(), db=stats_db)

        self.append_sample(txn, address, timestamp, response_time)

    def append_sample(
        self,
        txn: lmdb.Transaction,
        address: str,
        timestamp: datetime,
        response_time: float,
    ) -> None:
        """Append one record to the minute key of ``address`` within ``txn``."""
        _validate_sample(address, response_time)
        pings = self.store.bucket(txn, self.config.pings_bucket)

        key = make_key(address, to_local(timestamp))
        record = encode_sample(timestamp, response_time)

        old = txn.get(key, db=pings)
        value = record if old is None else bytes(old) + record
        txn.put(key, value, db=pings)

    # Reads

    def query(
        self,
        address: str,
        start: datetime,
        end: datetime,
        bucket_duration: timedelta,
    ) -> list[PingGroup]:
        """Return the groups of ``bucket_duration`` tiling ``[start, end)``."""
        if not address:
            raise IPRequiredError()

        # Keys are written in the local zone and samples carry whole seconds
        start = truncate_to_second(to_local(start))
        end = truncate_to_second(to_local(end))

        with self.store.view() as txn, closing(
            self._iter_samples(txn, address, start, end)
        ) as samples:
            groups = group_samples(samples, start, end, bucket_duration)

        logger.debug(
            "Query %s [%s, %s) by %s -> %d groups",
            address,
            start.isoformat(),
            end.isoformat(),
            bucket_duration,
            len(groups),
        )
        return groups

    def _iter_samples(
        self,
        txn: lmdb.Transaction,
        address: str,
        start: datetime,
        end: datetime,
    ) -> Generator[tuple[datetime, float], None, None]:
        pings = self.store.bucket(txn, self.config.pings_bucket)
        prefix = key_prefix(address)
        min_key = make_key(address, start)
        max_key = make_key(address, end)

        cursor = txn.cursor(db=pings)
        if not cursor.set_range(min_key):
            return

        for key, value in cursor.iternext():
            # Both checks: keys of another address can sort before max_key
            if not key.startswith(prefix) or key > max_key:
                break

            try:
                key_address, minute_start = parse_key(key)
            except InvalidKeyError as e:
                raise KeyTimestampParsingError(key, str(e)) from e
            if key_address != address:
                continue

            for second_offset, res_time in iter_records(value):
                yield minute_start + timedelta(seconds=second_offset), res_time

    # Address stats

    def get_address_stats(self, address: str) -> AddressStats | None:
        if not address:
            raise IPRequiredError()

        with self.store.view() as txn:
            stats_db = self.store.bucket(txn, self.config.stats_bucket)
            return self._get_stats(txn, stats_db, address)

    def get_all_address_stats(self) -> list[AddressStats]:
        with self.store.view() as txn:
            stats_db = self.store.bucket(txn, self.config.stats_bucket)
            return [
                AddressStats.from_bytes(value)
                for _, value in txn.cursor(db=stats_db).iternext()
            ]

    def save_address_stats(self, stats: AddressStats) -> None:
        if not stats.address:
            raise IPRequiredError()

        with self.store.update() as txn:
            stats_db = self.store.bucket(txn, self.config.stats_bucket)
            txn.put(stats.address.encode("utf-8"), stats.to_bytes(), db=stats_db)

    def most_recently_active(self) -> str | None:
        """Address with the latest sample, or None if nothing was recorded."""
        stats = most_recently_active(self.get_all_address_stats())
        return stats.address if stats else None

    @staticmethod
    def _get_stats(
        txn: lmdb.Transaction, stats_db: lmdb._Database, address: str
    ) -> AddressStats | None:
        data = txn.get(address.encode("utf-8"), db=stats_db)
        if data is None:
            return None
        return AddressStats.from_bytes(data)
