"""
traceroute runner for collecting network paths.
"""

import asyncio
import logging
from typing import AsyncIterator, List

from ..errors import TraceError

logger = logging.getLogger(__name__)


class TracerouteRunner:
    """Execute traceroute and stream its output lines as they are printed."""

    def __init__(self, command: str = "traceroute", max_hops: int = 6, timeout: int = 120):
        """
        Initialize traceroute runner.

        Args:
            command: traceroute executable to run
            max_hops: Maximum TTL probed
            timeout: Seconds before the whole run is killed
        """
        self.command = command
        self.max_hops = max_hops
        self.timeout = timeout

    def build_command(self, target: str) -> List[str]:
        """Build the traceroute argument vector for ``target``."""
        return [
            self.command,
            "-n",  # Numeric output, no reverse DNS
            "-m",
            str(self.max_hops),
            target,
        ]

    async def stream_lines(self, target: str) -> AsyncIterator[str]:
        """
        Run traceroute against ``target`` and yield stdout lines.

        Args:
            target: Hostname or IP address to trace

        Yields:
            Decoded output lines, without trailing newline

        Raises:
            TraceError: If traceroute is not installed or times out
        """
        cmd = self.build_command(target)
        logger.info(f"Running: {' '.join(cmd)}")
        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except FileNotFoundError:
            raise TraceError(
                f"{self.command} not found. Please install traceroute: "
                "brew install traceroute (macOS) or apt-get install traceroute (Linux)"
            )

        loop = asyncio.get_running_loop()
        deadline = loop.time() + self.timeout
        try:
            while True:
                remaining = deadline - loop.time()
                if remaining <= 0:
                    raise TraceError(f"traceroute to {target} timed out after {self.timeout}s")
                try:
                    raw = await asyncio.wait_for(process.stdout.readline(), timeout=remaining)
                except asyncio.TimeoutError:
                    raise TraceError(f"traceroute to {target} timed out after {self.timeout}s")
                if not raw:
                    break
                yield raw.decode(errors="replace").rstrip("\r\n")

            returncode = await process.wait()
            if returncode != 0:
                stderr = (await process.stderr.read()).decode(errors="replace").strip()
                logger.warning(f"traceroute to {target} exited with {returncode}: {stderr}")
        finally:
            if process.returncode is None:
                process.kill()
                await process.wait()
