"""Fixed-width binary record for a single ping sample.

Format: 7 bytes, little-endian

    | 1 byte        | 1 byte  | 4 bytes           | 1 byte  |
    | second offset | padding | response time f32 | padding |

The second offset is ``timestamp.second`` within the minute the storage key
points at. A response time of -1 means the ping timed out.
"""

from __future__ import annotations

import struct
from datetime import datetime
from typing import Iterator

from pinghist.errors import InvalidByteLengthError, TimeDeserializationError

RECORD_FORMAT = "<Bxfx"
RECORD_SIZE = struct.calcsize(RECORD_FORMAT)  # 7

TIMEOUT = -1.0
MAX_SECOND_OFFSET = 59


def encode_sample(timestamp: datetime, response_time: float) -> bytes:
    """Pack the second offset of ``timestamp`` and ``response_time``."""
    return struct.pack(RECORD_FORMAT, timestamp.second, response_time)


def decode_sample(data: bytes) -> tuple[int, float]:
    """Unpack one record into ``(second_offset, response_time)``."""
    if len(data) != RECORD_SIZE:
        raise InvalidByteLengthError(len(data), RECORD_SIZE)

    second_offset, response_time = struct.unpack(RECORD_FORMAT, data)
    if second_offset > MAX_SECOND_OFFSET:
        raise TimeDeserializationError(second_offset)
    return second_offset, response_time


def iter_records(value: bytes) -> Iterator[tuple[int, float]]:
    """Yield decoded records from a concatenated minute value, in stored order."""
    for offset in range(0, len(value), RECORD_SIZE):
        yield decode_sample(value[offset : offset + RECORD_SIZE])
