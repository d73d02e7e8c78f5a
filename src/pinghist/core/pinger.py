"""Single-shot probe that runs the system ``ping`` as a subprocess."""

from __future__ import annotations

import asyncio
import logging
import math

from pinghist.core.ping_parser import PingResponse, parse_ping_header, parse_ping_output
from pinghist.errors import ProbeError, ProbeTimeoutError

logger = logging.getLogger(__name__)

# ping exit status when no reply was received
NO_REPLY_EXIT_CODE = 1


class Pinger:
    """Async wrapper around ``ping -c 1 -W <timeout> <host>``."""

    def __init__(self, ping_command: str = "ping", timeout: float = 3.0) -> None:
        self.ping_command = ping_command
        self.timeout = timeout

    def build_command(self, host: str) -> list[str]:
        wait = str(max(1, int(math.ceil(self.timeout))))
        return [self.ping_command, "-c", "1", "-W", wait, host]

    async def ping(self, host: str) -> PingResponse:
        """Send one echo request to ``host``.

        Raises ProbeTimeoutError (carrying the resolved address) when no reply
        arrives, and ProbeError for anything else ping complains about.
        """
        command = self.build_command(host)
        try:
            proc = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.STDOUT,
            )
        except FileNotFoundError as e:
            raise ProbeError(f"ping command not found: {self.ping_command}") from e

        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=self.timeout + 2)
        except asyncio.TimeoutError:
            proc.kill()
            await proc.wait()
            raise ProbeTimeoutError(self._resolved_address(host, "")) from None

        output = stdout.decode("utf-8", errors="replace")
        return self.interpret(host, proc.returncode, output)

    def interpret(self, host: str, returncode: int | None, output: str) -> PingResponse:
        """Map a finished ping run onto a reply or a probe error."""
        if returncode == 0:
            response = parse_ping_output(output)
            if not response.host:
                response.host = host
            if not response.ip:
                response.ip = host
            return response

        if returncode == NO_REPLY_EXIT_CODE:
            raise ProbeTimeoutError(self._resolved_address(host, output))

        logger.debug("ping exited with %s: %s", returncode, output.strip())
        raise ProbeError(output.strip() or f"ping exited with status {returncode}")

    @staticmethod
    def _resolved_address(host: str, output: str) -> str:
        header = parse_ping_header(output)
        return header[1] if header else host
