"""Parse the textual output of ``ping -c 1``."""

from __future__ import annotations

import re
from dataclasses import dataclass

from pinghist.errors import DestinationUnreachableError, PingOutputParseError

IP_REGEX = re.compile(
    r"^(([0-9]|[1-9][0-9]|1[0-9]{2}|2[0-4][0-9]|25[0-5])\.){3}"
    r"([0-9]|[1-9][0-9]|1[0-9]{2}|2[0-4][0-9]|25[0-5])$"
)
# PING example.com (93.184.216.34) 56(84) bytes of data.
# PING 127.0.0.1 (127.0.0.1): 56 data bytes
_HEADER_REGEX = re.compile(r"^PING\s+(\S+)\s+\(([^)]+)\)")

_SKIP_WORDS = {"64", "from", "bytes", "ms"}


@dataclass
class PingResponse:
    host: str = ""
    ip: str = ""
    ttl: int = 0
    time: float = 0.0  # milliseconds
    icmp_seq: int = 0


def _field_value(part: str, name: str) -> str:
    pieces = part.split("=")
    if len(pieces) != 2:
        raise PingOutputParseError(f"Unexpected # of parts found while parsing {name}")
    return pieces[1]


def parse_ping_reply_line(line: str) -> PingResponse:
    """Parse a reply such as ``64 bytes from 1.2.3.4: icmp_seq=1 ttl=57 time=9.1 ms``."""
    response = PingResponse()
    for part in line.split():
        part = part.strip(":()")
        if not part or part in _SKIP_WORDS:
            continue

        try:
            if part.startswith("icmp_seq="):
                response.icmp_seq = int(_field_value(part, "icmp_seq"))
            elif part.startswith("ttl="):
                response.ttl = int(_field_value(part, "ttl"))
            elif part.startswith("time="):
                response.time = float(_field_value(part, "time"))
            elif IP_REGEX.match(part):
                response.ip = part
        except ValueError as e:
            raise PingOutputParseError(f"Failed parsing {part!r}: {e}") from e
    return response


def parse_ping_header(output: str) -> tuple[str, str] | None:
    """Return ``(host, resolved address)`` from the ``PING`` header line."""
    for line in output.splitlines():
        match = _HEADER_REGEX.match(line.strip())
        if match:
            return match.group(1), match.group(2)
    return None


def parse_ping_output(output: str) -> PingResponse:
    """Parse the first reply of a ping run.

    Raises DestinationUnreachableError when the output holds no reply.
    """
    for line in output.splitlines():
        if "bytes from" in line:
            response = parse_ping_reply_line(line.strip())
            header = parse_ping_header(output)
            if header:
                response.host = header[0]
                if not response.ip:
                    response.ip = header[1]
            return response
    raise DestinationUnreachableError()
