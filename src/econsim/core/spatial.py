"""
Spatial collaborators that answer "which regions are within trade range".

The trade engine only depends on the ``SpatialIndex`` protocol. Two
implementations ship: straight-line distance between region positions, and
hop count over an explicit adjacency graph.
"""

from __future__ import annotations

import math
from collections import deque
from typing import Iterable, Protocol

from econsim.core.region import Region


class SpatialIndex(Protocol):
    def neighbors(self, region: str, radius: float) -> list[str]:
        """Other regions within ``radius`` of ``region``, in lexical order."""
        ...


class CoordinateIndex:
    """Euclidean distance between region positions.

    A region without a position is treated as reachable from everywhere.
    """

    def __init__(self, regions: Iterable[Region]):
        self._positions: dict[str, tuple[float, float] | None] = {
            r.name: r.position for r in regions
        }

    def distance(self, a: str, b: str) -> float:
        pa = self._positions.get(a)
        pb = self._positions.get(b)
        if pa is None or pb is None:
            return 0.0
        return math.hypot(pa[0] - pb[0], pa[1] - pb[1])

    def neighbors(self, region: str, radius: float) -> list[str]:
        if region not in self._positions:
            return []
        return sorted(
            other for other in self._positions
            if other != region and self.distance(region, other) <= radius
        )


class AdjacencyIndex:
    """Hop count over an undirected region graph."""

    def __init__(self, adjacency: dict[str, list[str]]):
        self._graph: dict[str, set[str]] = {}
        for a, neighbours in adjacency.items():
            self._graph.setdefault(a, set())
            for b in neighbours:
                self._graph[a].add(b)
                self._graph.setdefault(b, set()).add(a)

    def hops(self, start: str) -> dict[str, int]:
        """Breadth-first hop distances from ``start``."""
        if start not in self._graph:
            return {}
        dist = {start: 0}
        queue = deque([start])
        while queue:
            node = queue.popleft()
            for nxt in self._graph[node]:
                if nxt not in dist:
                    dist[nxt] = dist[node] + 1
                    queue.append(nxt)
        return dist

    def neighbors(self, region: str, radius: float) -> list[str]:
        return sorted(
            other for other, d in self.hops(region).items()
            if other != region and d <= radius
        )
