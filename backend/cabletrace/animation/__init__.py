"""
Route animation: drawing-surface contract, sequential animation driver and
the live trace session that owns them.
"""

from .surface import MapSurface, RecordingSurface
from .driver import AnimationDriver, dash_pattern
from .session import TraceSession

__all__ = ["MapSurface", "RecordingSurface", "AnimationDriver", "dash_pattern", "TraceSession"]
