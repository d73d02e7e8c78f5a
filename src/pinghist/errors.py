"""Exception hierarchy, grouped by kind so callers can tell them apart."""

from __future__ import annotations


class PinghistError(Exception):
    """Base class for every error raised by pinghist itself."""


# Validation: rejected before any I/O, never retried


class ValidationError(PinghistError, ValueError):
    pass


class IPRequiredError(ValidationError):
    def __init__(self) -> None:
        super().__init__("IP can't be empty string")


class ResponseTimeOutOfRangeError(ValidationError):
    def __init__(self, response_time: float) -> None:
        self.response_time = response_time
        super().__init__(f"Response time must be >= -1, got {response_time}")


class InvalidRangeError(ValidationError):
    pass


# Schema: the caller must run create_schema()


class SchemaError(PinghistError):
    pass


class BucketNotFoundError(SchemaError):
    def __init__(self, bucket: str) -> None:
        self.bucket = bucket
        super().__init__(f"could not find bucket: {bucket}")


# Codec: corrupt or foreign data sharing the namespace


class CodecError(PinghistError):
    pass


class InvalidByteLengthError(CodecError):
    def __init__(self, length: int, expected: int) -> None:
        self.length = length
        super().__init__(f"invalid # of bytes: {length} (expected {expected})")


class TimeDeserializationError(CodecError):
    def __init__(self, second_offset: int) -> None:
        self.second_offset = second_offset
        super().__init__(f"second offset is too large (> 59): {second_offset}")


class InvalidKeyError(CodecError):
    def __init__(self, key: bytes) -> None:
        self.key = key
        super().__init__(f"Could not parse key: {key!r}")


class KeyTimestampParsingError(CodecError):
    def __init__(self, key: bytes, reason: str = "") -> None:
        self.key = key
        message = f"Can't parse key timestamp: {key!r}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class AddressStatsDeserializationError(CodecError):
    pass


# Probe


class ProbeError(PinghistError):
    pass


class ProbeTimeoutError(ProbeError):
    """No reply arrived; carries the address the host resolved to."""

    def __init__(self, address: str) -> None:
        self.address = address
        super().__init__(f"Request timeout for {address}")


class DestinationUnreachableError(ProbeError):
    def __init__(self) -> None:
        super().__init__("Destination unreachable")


class PingOutputParseError(ProbeError):
    pass
