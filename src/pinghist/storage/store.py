"""Ordered key-value store on top of LMDB.

Buckets are LMDB named databases. Keys are raw bytes kept in lexicographic
order, so a cursor ``set_range`` is a seek to the first key >= the given one.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

import lmdb

from pinghist.config import StoreConfig
from pinghist.errors import BucketNotFoundError

logger = logging.getLogger(__name__)

MAX_BUCKETS = 8


class Store:
    """One open LMDB environment (a single file plus its ``-lock`` file)."""

    def __init__(self, config: StoreConfig) -> None:
        self.config = config
        self.path = Path(config.path)
        if self.path.parent != Path("."):
            self.path.parent.mkdir(parents=True, exist_ok=True)

        self._env = lmdb.open(
            str(self.path),
            subdir=False,
            map_size=config.map_size,
            max_dbs=MAX_BUCKETS,
            sync=config.sync,
        )
        logger.debug("Opened store %s", self.path)

    @property
    def max_key_size(self) -> int:
        return self._env.max_key_size()

    def close(self) -> None:
        self._env.close()

    @contextmanager
    def view(self) -> Iterator[lmdb.Transaction]:
        """Read-only transaction over a snapshot taken at begin."""
        with self._env.begin(write=False) as txn:
            yield txn

    @contextmanager
    def update(self) -> Iterator[lmdb.Transaction]:
        """Read-write transaction; committed only if the block raises nothing."""
        with self._env.begin(write=True) as txn:
            yield txn

    def bucket(self, txn: lmdb.Transaction, name: str) -> lmdb._Database:
        """Return the handle of an existing bucket within ``txn``."""
        try:
            return self._env.open_db(name.encode("utf-8"), txn=txn, create=False)
        except lmdb.NotFoundError:
            raise BucketNotFoundError(name) from None

    def create_buckets(self, names: list[str]) -> None:
        with self.update() as txn:
            for name in names:
                self._env.open_db(name.encode("utf-8"), txn=txn, create=True)
        logger.debug("Ensured buckets %s", names)

    def delete_buckets(self, names: list[str]) -> None:
        """Drop the named buckets; missing ones are skipped."""
        with self.update() as txn:
            for name in names:
                try:
                    db = self._env.open_db(name.encode("utf-8"), txn=txn, create=False)
                except lmdb.NotFoundError:
                    continue
                txn.drop(db, delete=True)
        logger.debug("Dropped buckets %s", names)
