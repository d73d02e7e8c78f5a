"""Tests for the 7-byte sample record."""

import struct
from datetime import datetime, timezone

import pytest

from pinghist.errors import InvalidByteLengthError, TimeDeserializationError
from pinghist.storage.codec import (
    RECORD_SIZE,
    decode_sample,
    encode_sample,
    iter_records,
)


def _f32(value: float) -> float:
    return struct.unpack("<f", struct.pack("<f", value))[0]


def test_record_size():
    assert RECORD_SIZE == 7


def test_encode_layout():
    ts = datetime(2015, 1, 1, 12, 30, 42, tzinfo=timezone.utc)
    data = encode_sample(ts, 1.5)
    assert len(data) == 7
    assert data[0] == 42
    assert data[1] == 0
    assert data[2:6] == struct.pack("<f", 1.5)
    assert data[6] == 0


@pytest.mark.parametrize("second", [0, 1, 30, 59])
@pytest.mark.parametrize("res_time", [-1.0, 0.0, 0.045, 13.95, 15000.0])
def test_round_trip(second, res_time):
    ts = datetime(2015, 1, 1, 12, 30, second, tzinfo=timezone.utc)
    offset, decoded = decode_sample(encode_sample(ts, res_time))
    assert offset == second
    assert decoded == _f32(res_time)


def test_timeout_sentinel_is_exact():
    ts = datetime(2015, 1, 1, 12, 30, 5)
    assert decode_sample(encode_sample(ts, -1))[1] == -1.0


def test_decode_returns_python_float():
    ts = datetime(2015, 1, 1, 12, 30, 5)
    _, decoded = decode_sample(encode_sample(ts, 1.1))
    assert isinstance(decoded, float)
    assert decoded == pytest.approx(1.1, rel=1e-6)


def test_padding_ignored_on_read():
    data = bytearray(encode_sample(datetime(2015, 1, 1, 0, 0, 7), 2.5))
    data[1] = 0xFF
    data[6] = 0xAB
    assert decode_sample(bytes(data)) == (7, 2.5)


def test_decode_rejects_second_offset_60():
    data = bytes([60, 0]) + struct.pack("<f", 1.0) + b"\x00"
    with pytest.raises(TimeDeserializationError):
        decode_sample(data)


@pytest.mark.parametrize("length", [0, 1, 6, 8, 14])
def test_decode_rejects_wrong_length(length):
    with pytest.raises(InvalidByteLengthError):
        decode_sample(b"\x00" * length)


def test_iter_records_in_stored_order():
    base = datetime(2015, 1, 1, 12, 30, 0)
    value = b"".join(
        encode_sample(base.replace(second=s), float(s)) for s in (3, 1, 2)
    )
    assert list(iter_records(value)) == [(3, 3.0), (1, 1.0), (2, 2.0)]


def test_iter_records_truncated_value():
    value = encode_sample(datetime(2015, 1, 1), 1.0) + b"\x01\x02"
    with pytest.raises(InvalidByteLengthError):
        list(iter_records(value))
