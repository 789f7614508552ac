"""
Path search over the cable graph.

``find_path`` returns the first path a depth-first walk discovers when
edges are tried in insertion order. It is not a shortest-path search.
"""

import logging
from collections import deque
from typing import Dict, List, Mapping, Optional, Sequence

from .graph import Edge

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 200_000


def _bfs_path(
    adjacency: Mapping[str, Sequence[Edge]], start: str, end: str
) -> Optional[List[str]]:
    """Breadth-first path from start to end, or None if end is unreachable."""
    parents: Dict[str, Optional[str]] = {start: None}
    queue = deque([start])
    while queue:
        vertex = queue.popleft()
        if vertex == end:
            path = []
            while vertex is not None:
                path.append(vertex)
                vertex = parents[vertex]
            return path[::-1]
        for edge in adjacency.get(vertex, ()):
            if edge.to not in parents:
                parents[edge.to] = vertex
                queue.append(edge.to)
    return None


def find_path(
    adjacency: Mapping[str, Sequence[Edge]],
    start: str,
    end: str,
    search_limit: int = DEFAULT_SEARCH_LIMIT,
) -> Optional[List[str]]:
    """
    Find a landing path from ``start`` to ``end``.

    The walk keeps an explicit stack of edge iterators, one frame per vertex
    on the current path. A vertex is excluded only while it is on the
    current path, so sibling branches never share exclusions.

    Args:
        adjacency: Landing key -> outgoing edges
        start: Source landing key
        end: Target landing key
        search_limit: Maximum frames to push before giving up on
            first-found order and returning a breadth-first path

    Returns:
        Ordered landing keys from start to end inclusive, ``[start]`` when
        start == end, or None when no path exists.
    """
    if start == end:
        return [start]

    # An unreachable target would make the walk enumerate every simple path.
    fallback = _bfs_path(adjacency, start, end)
    if fallback is None:
        return None

    path = [start]
    on_path = {start}
    stack = [iter(adjacency.get(start, ()))]
    expansions = 0

    while stack:
        edge = next(stack[-1], None)
        if edge is None:
            stack.pop()
            on_path.discard(path.pop())
            continue
        if edge.to in on_path:
            continue
        if edge.to == end:
            return path + [end]

        expansions += 1
        if expansions > search_limit:
            logger.warning(
                f"Path search {start} -> {end} exceeded {search_limit} expansions, "
                "using breadth-first path"
            )
            return fallback

        path.append(edge.to)
        on_path.add(edge.to)
        stack.append(iter(adjacency.get(edge.to, ())))

    return None
