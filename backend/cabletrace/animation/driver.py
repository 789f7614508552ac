"""
Sequential, cancellable animation of route segments.

Each segment is drawn as its own line layer and "grown" by stepping its dash
pattern from empty to solid before the next segment starts. Playback runs as
an asyncio task; cancellation is checked at every suspension point and
removes every layer the cancelled run created.
"""

import asyncio
import itertools
import logging
from typing import List, Sequence, Tuple

from .surface import MapSurface
from ..routing.planner import RouteSegment, SegmentKind

logger = logging.getLogger(__name__)

DASH_LENGTH = 4.0

SEGMENT_PAINT = {
    SegmentKind.ACCESS: {"line-color": "#ff8c00", "line-width": 2},
    SegmentKind.CABLE: {"line-color": "#00bfff", "line-width": 3},
    SegmentKind.DIRECT: {"line-color": "#ff3b30", "line-width": 2},
    SegmentKind.EGRESS: {"line-color": "#ff8c00", "line-width": 2},
}


def dash_pattern(step: int, steps: int) -> Tuple[float, float]:
    """Dash/gap pair for animation step ``step`` of ``steps``; the last step is solid."""
    dash = round(DASH_LENGTH * step / steps, 4)
    return (dash, round(DASH_LENGTH - dash, 4))


class AnimationDriver:
    """Play segment lists onto one surface, strictly one segment at a time.

    Attributes:
        surface: Surface handle owned by the caller
        steps: Dash-pattern steps per segment
        frame_seconds: Delay between steps
        pause_seconds: Delay between segments
        cursor: Index of the segment being played in the current run
    """

    _runs = itertools.count(1)

    def __init__(
        self,
        surface: MapSurface,
        steps: int = 40,
        frame_seconds: float = 0.02,
        pause_seconds: float = 0.3,
        layer_prefix: str = "route",
    ):
        if steps < 1:
            raise ValueError("steps must be at least 1")
        self.surface = surface
        self.steps = steps
        self.frame_seconds = frame_seconds
        self.pause_seconds = pause_seconds
        self.layer_prefix = layer_prefix
        self.cursor = 0
        self.drawn: List[str] = []

    async def play(self, segments: Sequence[RouteSegment]) -> int:
        """
        Animate ``segments`` in order.

        Returns:
            Number of segments fully drawn

        Raises:
            asyncio.CancelledError: If cancelled; layers of this run are removed first
        """
        segments = tuple(segments)
        run = next(self._runs)
        created: List[str] = []
        self.cursor = 0
        try:
            for index, segment in enumerate(segments):
                self.cursor = index
                layer_id = f"{self.layer_prefix}-{run}-{index}"
                if self.surface.has_layer(layer_id):
                    self.surface.remove_layer(layer_id)
                self.surface.add_line(
                    layer_id,
                    segment.coordinates,
                    **SEGMENT_PAINT[segment.kind],
                    **{"line-dasharray": list(dash_pattern(0, self.steps))},
                )
                created.append(layer_id)

                for step in range(1, self.steps + 1):
                    await asyncio.sleep(self.frame_seconds)
                    self.surface.set_line_dash(layer_id, dash_pattern(step, self.steps))

                if index < len(segments) - 1:
                    await asyncio.sleep(self.pause_seconds)
        except asyncio.CancelledError:
            logger.debug(f"Playback run {run} cancelled at segment {self.cursor}")
            self._remove(created)
            raise

        self.drawn.extend(created)
        return len(created)

    def clear(self) -> None:
        """Remove every layer drawn by completed runs."""
        self._remove(self.drawn)
        self.drawn = []

    def _remove(self, layer_ids: List[str]) -> None:
        if getattr(self.surface, "destroyed", False):
            return
        for layer_id in layer_ids:
            self.surface.remove_layer(layer_id)
