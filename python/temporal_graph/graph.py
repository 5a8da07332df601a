"""
graph.py — Undirected Temporal Graph

Vertices are non-negative integers. Every undirected edge {u, v} is stored
once under its normalized key (min, max) and owns a non-empty set of
timestamps (labels).

Invariants:
  - every endpoint of a stored edge is a vertex of the graph
  - lookups are symmetric: (u, v) and (v, u) address the same edge
  - a stored edge never has an empty label set (removing the last label
    deletes the edge)
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, Iterator, List, Optional, Set, Tuple

from .types import EdgeKey, GraphState, IncidentLabel, TimeStep, VertexId, normalize_pair

if TYPE_CHECKING:
    from .minimizer import MinimizationConfig, MinimizationResult


@dataclass
class TemporalGraph:
    """
    In-memory temporal graph.

    Operations:
      - add/remove: vertices, edge labels, whole edges
      - query: labels of an edge, neighbors at a time, edges at a time
      - to_state: canonical snapshot used for cycle detection
    """

    vertex_set: Set[VertexId] = field(default_factory=set)

    # (min, max) -> labels
    edges: Dict[EdgeKey, Set[TimeStep]] = field(default_factory=dict)

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def add_vertex(self, vertex: VertexId) -> bool:
        """Insert vertex; returns False if it was already present."""
        if vertex in self.vertex_set:
            return False
        self.vertex_set.add(vertex)
        return True

    def add_edge(self, u: VertexId, v: VertexId, time: TimeStep) -> None:
        """Add label `time` to edge {u, v}, creating the edge and endpoints as needed."""
        self.add_vertex(u)
        self.add_vertex(v)
        self.edges.setdefault(normalize_pair(u, v), set()).add(time)

    def remove_edge_timestamp(self, u: VertexId, v: VertexId, time: TimeStep) -> bool:
        key = normalize_pair(u, v)
        times = self.edges.get(key)
        if times is None or time not in times:
            return False

        times.discard(time)
        if not times:
            del self.edges[key]
        return True

    def remove_edge(self, u: VertexId, v: VertexId) -> bool:
        return self.edges.pop(normalize_pair(u, v), None) is not None

    def copy(self) -> "TemporalGraph":
        return TemporalGraph(
            vertex_set=set(self.vertex_set),
            edges={key: set(times) for key, times in self.edges.items()},
        )

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def has_vertex(self, vertex: VertexId) -> bool:
        return vertex in self.vertex_set

    def has_edge_at_time(self, u: VertexId, v: VertexId, time: TimeStep) -> bool:
        return time in self.edges.get(normalize_pair(u, v), ())

    def edge_times(self, u: VertexId, v: VertexId) -> Optional[List[TimeStep]]:
        """Sorted labels of {u, v}, or None if the edge does not exist."""
        times = self.edges.get(normalize_pair(u, v))
        if times is None:
            return None
        return sorted(times)

    def get_edge_time_range(self, u: VertexId, v: VertexId) -> Optional[Tuple[TimeStep, TimeStep]]:
        """(tmin, tmax) of {u, v}, or None if the edge does not exist."""
        times = self.edges.get(normalize_pair(u, v))
        if not times:
            return None
        return min(times), max(times)

    def neighbors_at_time(self, vertex: VertexId, time: TimeStep) -> List[VertexId]:
        neighbors = []
        for (a, b), times in self.edges.items():
            if time not in times:
                continue
            if a == vertex:
                neighbors.append(b)
            elif b == vertex:
                neighbors.append(a)
        return sorted(neighbors)

    def get_all_neighbors(self, vertex: VertexId) -> List[VertexId]:
        """Neighbors of `vertex` over all time steps, ascending."""
        neighbors = set()
        for a, b in self.edges:
            if a == vertex:
                neighbors.add(b)
            elif b == vertex:
                neighbors.add(a)
        return sorted(neighbors)

    def edges_at_time(self, time: TimeStep) -> List[EdgeKey]:
        return sorted(key for key, times in self.edges.items() if time in times)

    def vertices(self) -> List[VertexId]:
        return sorted(self.vertex_set)

    def timestamps(self) -> List[TimeStep]:
        """Distinct labels used anywhere in the graph, ascending."""
        seen: Set[TimeStep] = set()
        for times in self.edges.values():
            seen.update(times)
        return sorted(seen)

    def iter_edges(self) -> Iterator[Tuple[EdgeKey, List[TimeStep]]]:
        """(key, sorted labels) in ascending key order."""
        for key in sorted(self.edges):
            yield key, sorted(self.edges[key])

    def vertex_count(self) -> int:
        return len(self.vertex_set)

    def edge_count(self) -> int:
        return len(self.edges)

    @property
    def label_count(self) -> int:
        return sum(len(times) for times in self.edges.values())

    def is_connected(self) -> bool:
        """True if every vertex is reachable from every other at some time."""
        if not self.vertex_set:
            return True
        if not self.edges:
            return len(self.vertex_set) <= 1

        start = min(self.vertex_set)
        visited = {start}
        queue = deque([start])
        while queue:
            current = queue.popleft()
            for neighbor in self.get_all_neighbors(current):
                if neighbor not in visited:
                    visited.add(neighbor)
                    queue.append(neighbor)
        return len(visited) == len(self.vertex_set)

    # ------------------------------------------------------------------
    # Canonical state
    # ------------------------------------------------------------------

    def to_state(self) -> GraphState:
        return GraphState.from_edges(self.edges.items())

    def has_seen_state(self, seen_states: Set[GraphState]) -> bool:
        return self.to_state() in seen_states

    # ------------------------------------------------------------------
    # Rewriting moves (see operators.py)
    # ------------------------------------------------------------------

    def find_wrappable_edge(self) -> Optional[EdgeKey]:
        from .operators import find_wrappable_edge
        return find_wrappable_edge(self)

    def find_min_incident_in_range(self, u: VertexId, v: VertexId) -> Optional[IncidentLabel]:
        from .operators import find_min_incident_in_range
        return find_min_incident_in_range(self, u, v)

    def transfer_labels_through_edge(self, anchor: VertexId, pivot: VertexId) -> int:
        from .operators import transfer_labels_through_edge
        return transfer_labels_through_edge(self, anchor, pivot)

    def is_label_minimal(self) -> bool:
        """Run the minimizer with the default configuration."""
        from .minimizer import LabelMinimizer
        return LabelMinimizer(self).run().is_minimal

    def is_label_minimal_with_config(self, config: "MinimizationConfig") -> "MinimizationResult":
        from .minimizer import LabelMinimizer
        return LabelMinimizer(self, config).run()

    def __repr__(self) -> str:
        return (
            f"TemporalGraph(vertices={self.vertex_count()}, edges={self.edge_count()}, "
            f"labels={self.label_count})"
        )
