"""
Database models package.
"""

from .trace import Trace, TraceStatus
from .traceroute import TracerouteHop

__all__ = [
    "Trace",
    "TraceStatus",
    "TracerouteHop",
]
