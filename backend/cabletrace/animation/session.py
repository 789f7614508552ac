"""
Live trace session: the owner of one map surface and its animation.

Hops are appended one at a time. Each new hop plans the pair it forms with
the previous hop and queues that pair's segments; a single play loop feeds
queued batches to the AnimationDriver in order, so a new hop never
interrupts a segment that is being drawn. Changing the map style or closing
the session tears down the loop and the surface before anything else runs.
"""

import asyncio
import logging
from typing import Callable, List, Optional

from .driver import AnimationDriver
from .surface import RecordingSurface
from ..config import MAP_STYLES
from ..errors import MalformedRecord
from ..routing.graph import CableGraph
from ..routing.planner import PairPlan, RoutePlanner, collect_segments
from ..schemas.hop import Hop

logger = logging.getLogger(__name__)

SurfaceFactory = Callable[[str], RecordingSurface]


class TraceSession:
    """One trace visualization: hops, plans, surface and play loop."""

    def __init__(
        self,
        target: str,
        network: Optional[CableGraph] = None,
        style: str = "streets",
        surface_factory: SurfaceFactory = RecordingSurface,
        animation_steps: int = 40,
        frame_seconds: float = 0.02,
        pause_seconds: float = 0.3,
    ):
        if style not in MAP_STYLES:
            raise ValueError(f"Unknown map style: {style}")
        self.target = target
        self.network = network
        self.style = style
        self.surface_factory = surface_factory
        self.planner = RoutePlanner(network)
        self.hops: List[Hop] = []
        self.plans: List[PairPlan] = []
        self.finished = False
        self.closed = False
        self.error: Optional[str] = None
        self._animation = dict(steps=animation_steps, frame_seconds=frame_seconds, pause_seconds=pause_seconds)
        self.surface: Optional[RecordingSurface] = None
        self.driver: Optional[AnimationDriver] = None
        self.pending = 0
        self._queue: Optional[asyncio.Queue] = None
        self._loop_task: Optional[asyncio.Task] = None

    # -- lifecycle --------------------------------------------------------

    async def open(self) -> None:
        """Create the surface and start the play loop."""
        self.surface = self.surface_factory(self.style)
        self._draw_datasets()
        self.driver = AnimationDriver(self.surface, **self._animation)
        self._start_loop()
        logger.info(f"Trace session for {self.target} opened with style {self.style}")

    async def close(self) -> None:
        """Stop the play loop, remove every route drawable and destroy the surface."""
        if self.closed:
            return
        await self._teardown()
        self.closed = True
        logger.info(f"Trace session for {self.target} closed")

    async def restyle(self, style: str) -> None:
        """Rebuild the surface with a new map style and replay all hops onto it."""
        if self.closed:
            raise RuntimeError("Session is closed")
        if style not in MAP_STYLES:
            raise ValueError(f"Unknown map style: {style}")
        await self._teardown()
        self.style = style
        hops, self.hops, self.plans = self.hops, [], []
        await self.open()
        for hop in hops:
            self.add_hop(hop)

    async def replay(self) -> None:
        """Discard drawn and in-flight route layers and animate the whole route again."""
        if self.surface is None or self.closed:
            raise RuntimeError("Session is not open")
        await self._stop_loop()
        self.driver.clear()
        self._start_loop()
        segments = collect_segments(self.plans)
        if segments:
            self._enqueue(tuple(segments))

    async def _teardown(self) -> None:
        await self._stop_loop()
        if self.driver is not None:
            self.driver.clear()
        if self.surface is not None:
            self.surface.destroy()

    # -- hops -------------------------------------------------------------

    def add_hop(self, hop: Hop) -> Optional[PairPlan]:
        """
        Append a hop, draw its marker and queue the new pair's segments.

        Returns:
            The PairPlan for (previous hop, hop), or None for the first hop

        Raises:
            MalformedRecord: If the hop number does not follow the last hop's
        """
        if self.surface is None or self.closed:
            raise RuntimeError("Session is not open")
        if self.hops and hop.hop <= self.hops[-1].hop:
            raise MalformedRecord(f"Hop {hop.hop} does not follow hop {self.hops[-1].hop}")
        self.hops.append(hop)

        if hop.coordinate is not None:
            if not any(h.coordinate is not None for h in self.hops[:-1]):
                self.surface.fly_to(hop.coordinate, zoom=2)
            self.surface.add_marker(f"hop-{hop.hop}", hop.coordinate, popup=hop.label())

        if len(self.hops) < 2:
            return None
        plan = self.planner.plan_pair(self.hops[-2], hop, index=len(self.plans))
        self.plans.append(plan)
        if plan.segments:
            self._enqueue(tuple(plan.segments))
        return plan

    def finish(self, error: Optional[str] = None) -> None:
        """Mark the hop stream as ended, optionally with the error that ended it."""
        self.finished = True
        self.error = error

    async def wait_idle(self) -> None:
        """Wait until every queued segment batch has been played."""
        if self._queue is not None:
            await self._queue.join()

    def _start_loop(self) -> None:
        self._queue = asyncio.Queue()
        self.pending = 0
        self._loop_task = asyncio.get_running_loop().create_task(self._play_loop())

    async def _stop_loop(self) -> None:
        """Cancel the play loop; an in-flight batch removes its own layers."""
        task, self._loop_task = self._loop_task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        self.pending = 0

    def _enqueue(self, batch) -> None:
        self.pending += 1
        self._queue.put_nowait(batch)

    async def _play_loop(self) -> None:
        queue = self._queue
        while True:
            batch = await queue.get()
            try:
                await self.driver.play(batch)
            except Exception as e:
                # Keep playing later batches; one bad segment must not stall the route
                logger.error(f"Failed to animate segment batch for {self.target}: {e}")
            finally:
                self.pending -= 1
                queue.task_done()

    # -- drawing ----------------------------------------------------------

    def _draw_datasets(self) -> None:
        """Overlay the cable routes and landing points the graph was built from."""
        if self.network is None or self.network.is_empty:
            return
        drawn = set()
        for key, edges in self.network.adjacency.items():
            for edge in edges:
                pair = (min(key, edge.to), max(key, edge.to), edge.cable_name)
                if pair in drawn:
                    continue
                drawn.add(pair)
                self.surface.add_line(
                    f"cable-{len(drawn)}",
                    edge.geometry,
                    **{"line-color": "#00ffff", "line-width": 1.2, "line-opacity": 0.6},
                )
        self.surface.add_points(
            "landing-points",
            list(self.network.coord_map.values()),
            **{"circle-radius": 3, "circle-color": "#ff69b4", "circle-stroke-color": "#fff"},
        )

    def status(self) -> dict:
        return {
            "target": self.target,
            "style": self.style,
            "hop_count": len(self.hops),
            "finished": self.finished,
            "closed": self.closed,
            "pending_batches": self.pending,
            "fallback_mode": self.planner.fallback_mode,
            "error": self.error,
            "hops": [hop.summary() for hop in self.hops],
            "plans": [plan.describe() for plan in self.plans],
        }
