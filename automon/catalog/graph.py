"""Weighted location graph built from the location catalog.

Edges carry a travel cost in ticks. The travel handler uses the graph to
size busy windows and to route trainers toward locations that are not
directly connected.
"""

from __future__ import annotations

import heapq
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Optional, Tuple

from .locations import LOCATIONS
from .schemas import LocationConnection, LocationDef


@dataclass
class LocationGraph:
    """Adjacency view over ``LocationDef`` rows."""

    nodes: Dict[str, LocationDef] = field(default_factory=dict)
    adjacency: Dict[str, List[LocationConnection]] = field(default_factory=dict)

    @classmethod
    def from_locations(cls, locations: Iterable[LocationDef]) -> "LocationGraph":
        graph = cls()
        for location in locations:
            graph.nodes[location.id] = location
            graph.adjacency[location.id] = list(location.connections)
        return graph

    def has_node(self, node_id: str) -> bool:
        return node_id in self.nodes

    def neighbors(self, node_id: str) -> List[str]:
        return [edge.to for edge in self.adjacency.get(node_id, [])]

    def edge(self, source: str, target: str) -> Optional[LocationConnection]:
        for connection in self.adjacency.get(source, []):
            if connection.to == target:
                return connection
        return None

    def travel_ticks(self, source: str, target: str) -> Optional[int]:
        connection = self.edge(source, target)
        return connection.travel_ticks if connection else None

    def shortest_route(self, start: str, goal: str) -> Optional[List[str]]:
        """Return the cheapest node path from ``start`` to ``goal`` by total travel ticks.

        Dijkstra over edge travel costs. Ties between equal-cost routes resolve
        by catalog edge order. Returns None when either node is unknown or the
        goal is unreachable.
        """

        if start not in self.nodes or goal not in self.nodes:
            return None
        if start == goal:
            return [start]

        # (cost, insertion order, node, path)
        counter = 0
        frontier: List[Tuple[int, int, str, List[str]]] = [(0, counter, start, [start])]
        settled: Dict[str, int] = {}

        while frontier:
            cost, _, node, path = heapq.heappop(frontier)
            if node in settled:
                continue
            settled[node] = cost
            if node == goal:
                return path
            for connection in self.adjacency.get(node, []):
                if connection.to in settled:
                    continue
                counter += 1
                heapq.heappush(
                    frontier,
                    (cost + connection.travel_ticks, counter, connection.to, path + [connection.to]),
                )
        return None

    def describe(self) -> List[dict]:
        """Compact JSON-ready view used in observation snapshots."""
        return [
            {
                "id": location.id,
                "name": location.name,
                "danger_level": location.danger_level,
                "connections": [edge.model_dump() for edge in location.connections],
            }
            for location in self.nodes.values()
        ]


WORLD_MAP = LocationGraph.from_locations(LOCATIONS)
