"""
Hop stream: traceroute output turned into numbered, geolocated Hop records.
"""

import json
import logging
from typing import Any, AsyncIterator, Optional

from pydantic import ValidationError

from .geoip import GeoIPClient, GeoLookupError
from .parser import parse_traceroute_line
from .runner import TracerouteRunner
from ..config import settings
from ..schemas.hop import Hop

logger = logging.getLogger(__name__)

GEO_LOOKUP_FAILED = "geo lookup failed"
END_EVENT = "event: end\ndata: done\n\n"


def format_sse(data: Any, event: Optional[str] = None) -> str:
    """
    Frame one server-sent event.

    Args:
        data: JSON-serializable payload, or a plain string sent as-is
        event: Optional event name

    Returns:
        SSE text block terminated by a blank line
    """
    body = data if isinstance(data, str) else json.dumps(data)
    prefix = f"event: {event}\n" if event else ""
    return f"{prefix}data: {body}\n\n"


async def stream_hops(
    target: str,
    runner: Optional[TracerouteRunner] = None,
    geoip: Optional[GeoIPClient] = None,
) -> AsyncIterator[Hop]:
    """
    Trace ``target`` and yield one Hop per responding address, numbered from 1.

    Geolocation failures, including answers that do not validate, still
    produce a hop carrying only the address and an error message, so hop
    numbering never skips.

    Raises:
        TraceError: If traceroute cannot be run
    """
    if runner is None:
        runner = TracerouteRunner(
            command=settings.traceroute_command,
            max_hops=settings.traceroute_max_hops,
            timeout=settings.traceroute_timeout,
        )
    owns_geoip = geoip is None
    if geoip is None:
        geoip = GeoIPClient(settings.geoip_url, settings.geoip_timeout)

    hop_number = 0
    try:
        async for line in runner.stream_lines(target):
            ip = parse_traceroute_line(line)
            if ip is None:
                continue
            hop_number += 1
            try:
                geo = await geoip.lookup(ip)
            except GeoLookupError as e:
                logger.warning(f"Hop {hop_number} ({ip}): {e}")
                yield Hop(hop=hop_number, ip=ip, error=GEO_LOOKUP_FAILED)
                continue
            try:
                hop = Hop(hop=hop_number, ip=ip, **geo)
            except ValidationError as e:
                logger.warning(f"Hop {hop_number} ({ip}): unusable geolocation: {e.error_count()} invalid field(s)")
                hop = Hop(hop=hop_number, ip=ip, error=GEO_LOOKUP_FAILED)
            yield hop
    finally:
        if owns_geoip:
            await geoip.aclose()
    logger.info(f"Trace to {target} produced {hop_number} hops")
