"""
Map drawing surface contract and the in-memory recording implementation.

The routing core never renders anything itself. It drives a MapSurface,
which a browser client replays onto a real map. RecordingSurface keeps the
current layer state and an ordered command log, and fans every command out
to subscribed asyncio queues (the session event stream).
"""

import abc
import asyncio
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

from ..routing.geo import Coordinate

logger = logging.getLogger(__name__)


class MapSurface(abc.ABC):
    """Opaque drawing surface the animation driver renders onto."""

    @abc.abstractmethod
    def add_line(self, layer_id: str, coordinates: Sequence[Coordinate], **paint: Any) -> None:
        """Add a named line layer."""

    @abc.abstractmethod
    def add_points(self, layer_id: str, coordinates: Sequence[Coordinate], **paint: Any) -> None:
        """Add a named point (circle) layer."""

    @abc.abstractmethod
    def add_marker(self, marker_id: str, coordinate: Coordinate, popup: Optional[str] = None) -> None:
        """Add a labelled marker."""

    @abc.abstractmethod
    def show_popup(self, coordinate: Coordinate, text: str) -> None:
        """Show a text popup at a location."""

    @abc.abstractmethod
    def fly_to(self, center: Coordinate, zoom: Optional[float] = None) -> None:
        """Re-center and optionally zoom the view."""

    @abc.abstractmethod
    def set_line_dash(self, layer_id: str, pattern: Tuple[float, float]) -> None:
        """Update the dash pattern of a line layer."""

    @abc.abstractmethod
    def remove_layer(self, layer_id: str) -> None:
        """Remove a layer or marker; unknown ids are ignored."""

    @abc.abstractmethod
    def has_layer(self, layer_id: str) -> bool:
        """Whether a layer or marker with this id is currently drawn."""

    @abc.abstractmethod
    def destroy(self) -> None:
        """Release the surface. Any later mutation is an error."""


class RecordingSurface(MapSurface):
    """In-memory surface that records state and streams drawing commands.

    Attributes:
        style: Key into MAP_STYLES the surface was created with
        layers: Layer/marker id -> last command that created it
        commands: Commands that rebuild the current drawing, in order. Only the
            last dash update of a layer is kept, and removed layers drop out.
        destroyed: Set once destroy() was called
    """

    def __init__(self, style: str = "streets", center: Optional[Coordinate] = None, zoom: float = 2):
        self.style = style
        self.layers: Dict[str, Dict[str, Any]] = {}
        self.commands: List[Dict[str, Any]] = []
        self.destroyed = False
        self._subscribers: List[asyncio.Queue] = []
        self._emit({"op": "create", "style": style, "center": center, "zoom": zoom})

    # -- subscription -----------------------------------------------------

    def subscribe(self, replay: bool = True) -> asyncio.Queue:
        """Return a queue receiving every future command, preceded by the history if replay."""
        queue: asyncio.Queue = asyncio.Queue()
        if replay:
            for command in self.commands:
                queue.put_nowait(command)
        self._subscribers.append(queue)
        return queue

    def unsubscribe(self, queue: asyncio.Queue) -> None:
        if queue in self._subscribers:
            self._subscribers.remove(queue)

    def _emit(self, command: Dict[str, Any], record: bool = True) -> None:
        if record:
            self.commands.append(command)
        for queue in self._subscribers:
            queue.put_nowait(command)

    def _forget(self, layer_id: str, *ops: str) -> None:
        """Drop history commands for a layer, live subscribers already saw them."""
        self.commands = [c for c in self.commands if not (c.get("id") == layer_id and c["op"] in ops)]

    def _check_alive(self, op: str) -> None:
        if self.destroyed:
            raise RuntimeError(f"Cannot {op} on a destroyed surface")

    # -- MapSurface -------------------------------------------------------

    def add_line(self, layer_id, coordinates, **paint):
        self._check_alive("add_line")
        if layer_id in self.layers:
            raise ValueError(f"Layer '{layer_id}' already exists")
        command = {"op": "add_line", "id": layer_id, "coordinates": [list(c) for c in coordinates], "paint": paint}
        self.layers[layer_id] = {**command, "paint": dict(paint)}
        self._emit(command)

    def add_points(self, layer_id, coordinates, **paint):
        self._check_alive("add_points")
        if layer_id in self.layers:
            raise ValueError(f"Layer '{layer_id}' already exists")
        command = {"op": "add_points", "id": layer_id, "coordinates": [list(c) for c in coordinates], "paint": paint}
        self.layers[layer_id] = {**command, "paint": dict(paint)}
        self._emit(command)

    def add_marker(self, marker_id, coordinate, popup=None):
        self._check_alive("add_marker")
        command = {"op": "add_marker", "id": marker_id, "coordinate": list(coordinate), "popup": popup}
        self._forget(marker_id, "add_marker")
        self.layers[marker_id] = command
        self._emit(command)

    def show_popup(self, coordinate, text):
        self._check_alive("show_popup")
        self._emit({"op": "show_popup", "coordinate": list(coordinate), "text": text})

    def fly_to(self, center, zoom=None):
        self._check_alive("fly_to")
        self._emit({"op": "fly_to", "center": list(center), "zoom": zoom})

    def set_line_dash(self, layer_id, pattern):
        self._check_alive("set_line_dash")
        if layer_id not in self.layers:
            raise KeyError(f"Layer '{layer_id}' does not exist")
        self.layers[layer_id]["paint"]["line-dasharray"] = list(pattern)
        self._forget(layer_id, "set_line_dash")
        self._emit({"op": "set_line_dash", "id": layer_id, "pattern": list(pattern)})

    def remove_layer(self, layer_id):
        self._check_alive("remove_layer")
        if self.layers.pop(layer_id, None) is not None:
            self._forget(layer_id, "add_line", "add_points", "add_marker", "set_line_dash")
            self._emit({"op": "remove_layer", "id": layer_id}, record=False)

    def has_layer(self, layer_id):
        return layer_id in self.layers

    def destroy(self):
        if self.destroyed:
            return
        self._emit({"op": "destroy"})
        self.layers.clear()
        self.destroyed = True
        self._subscribers.clear()
        logger.debug(f"Surface ({self.style}) destroyed")

    def layer_ids(self, prefix: str = "") -> List[str]:
        """Ids of current layers starting with ``prefix``, in creation order."""
        return [layer_id for layer_id in self.layers if layer_id.startswith(prefix)]
