"""Traceroute collection and geolocation."""

from .geoip import GeoIPClient, GeoLookupError
from .parser import parse_traceroute_line, parse_traceroute_output
from .runner import TracerouteRunner
from .stream import END_EVENT, GEO_LOOKUP_FAILED, format_sse, stream_hops

__all__ = [
    "GeoIPClient",
    "GeoLookupError",
    "parse_traceroute_line",
    "parse_traceroute_output",
    "TracerouteRunner",
    "END_EVENT",
    "GEO_LOOKUP_FAILED",
    "format_sse",
    "stream_hops",
]
