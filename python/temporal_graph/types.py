"""
temporal_graph/types.py — Data Structures for Temporal Graphs
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, NamedTuple, Tuple


VertexId = int
TimeStep = int
EdgeKey = Tuple[VertexId, VertexId]


def normalize_pair(a: VertexId, b: VertexId) -> EdgeKey:
    """Undirected edge key: smaller vertex id first."""
    return (a, b) if a <= b else (b, a)


class IncidentLabel(NamedTuple):
    """
    A label on an edge incident to a wrappable edge.

    neighbor: endpoint of the incident edge outside the wrappable edge
    common:   endpoint shared with the wrappable edge
    time:     the label itself
    """
    neighbor: VertexId
    common: VertexId
    time: TimeStep


@dataclass(frozen=True)
class GraphState:
    """
    Canonical snapshot of a graph's edges and labels.

    Edge keys are normalized and sorted, label tuples are sorted, so two
    graphs with the same content compare (and hash) equal no matter in which
    order their edges and labels were inserted.
    """
    edge_labels: Tuple[Tuple[EdgeKey, Tuple[TimeStep, ...]], ...] = ()

    @classmethod
    def from_edges(cls, edges: Iterable[Tuple[EdgeKey, Iterable[TimeStep]]]) -> "GraphState":
        items = [
            (normalize_pair(*key), tuple(sorted(set(times))))
            for key, times in edges
        ]
        items.sort(key=lambda item: item[0])
        return cls(edge_labels=tuple(items))

    @property
    def n_edges(self) -> int:
        return len(self.edge_labels)

    @property
    def n_labels(self) -> int:
        return sum(len(times) for _, times in self.edge_labels)

    def edges(self) -> List[EdgeKey]:
        return [key for key, _ in self.edge_labels]

    def __len__(self) -> int:
        return len(self.edge_labels)
