"""
operators.py — Rewriting Kernels

Queries and moves of the label rewriting system over a TemporalGraph.

Range semantics are strict everywhere: for an edge with labels
tmin = min(λ), tmax = max(λ), a label t is "in range" iff tmin < t < tmax.
Labels equal to either bound are never candidates and never move.

Kernels:
  - find_wrappable_edge: first edge (ascending key) that admits a wrap
  - find_min_incident_in_range: smallest in-range label next to an edge
  - transfer_labels_through_edge: relocate in-range labels from the
    pivot's edges onto the anchor's edges

Ordering is fixed so repeated runs make the same moves:
  edges are scanned in ascending (min, max) key order, candidates compare
  on (time, neighbor, common), neighbors are visited in ascending order.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional, Tuple

from .types import EdgeKey, IncidentLabel, TimeStep, VertexId, normalize_pair

if TYPE_CHECKING:
    from .graph import TemporalGraph


# =============================================================================
# RANGE HELPERS
# =============================================================================

def in_open_range(t: TimeStep, tmin: TimeStep, tmax: TimeStep) -> bool:
    return tmin < t < tmax


def multi_label_range(graph: "TemporalGraph", u: VertexId, v: VertexId) -> Optional[Tuple[TimeStep, TimeStep]]:
    """(tmin, tmax) if {u, v} exists with at least two labels, else None."""
    times = graph.edges.get(normalize_pair(u, v))
    if not times or len(times) < 2:
        return None
    tmin, tmax = min(times), max(times)
    if tmin >= tmax:
        return None
    return tmin, tmax


def get_edge_timestamps_in_range(
    graph: "TemporalGraph",
    u: VertexId,
    v: VertexId,
    tmin: TimeStep,
    tmax: TimeStep,
) -> List[TimeStep]:
    """Labels of {u, v} strictly inside (tmin, tmax), ascending."""
    times = graph.edges.get(normalize_pair(u, v), ())
    return sorted(t for t in times if in_open_range(t, tmin, tmax))


def _incident_edges(graph: "TemporalGraph", key: EdgeKey):
    """
    Yield (neighbor, common, labels) for every edge sharing exactly one
    endpoint with `key`, in ascending key order.
    """
    u, v = key
    for other in sorted(graph.edges):
        if other == key:
            continue
        a, b = other
        if a == u or a == v:
            yield b, a, graph.edges[other]
        elif b == u or b == v:
            yield a, b, graph.edges[other]


# =============================================================================
# WRAPPABLE EDGE
# =============================================================================

def has_incident_edge_in_range(
    graph: "TemporalGraph",
    u: VertexId,
    v: VertexId,
    tmin: TimeStep,
    tmax: TimeStep,
) -> bool:
    for _, _, times in _incident_edges(graph, normalize_pair(u, v)):
        if any(in_open_range(t, tmin, tmax) for t in times):
            return True
    return False


def is_wrappable(graph: "TemporalGraph", u: VertexId, v: VertexId) -> bool:
    bounds = multi_label_range(graph, u, v)
    if bounds is None:
        return False
    return has_incident_edge_in_range(graph, u, v, *bounds)


def find_wrappable_edge(graph: "TemporalGraph") -> Optional[EdgeKey]:
    """
    First edge {u, v} in ascending key order with |λ(uv)| >= 2 such that an
    incident edge carries a label strictly between min λ(uv) and max λ(uv).

    Returns the normalized key, or None when no edge qualifies.
    """
    for key in sorted(graph.edges):
        if is_wrappable(graph, *key):
            return key
    return None


# =============================================================================
# MINIMUM INCIDENT LABEL
# =============================================================================

def incident_labels_in_range(graph: "TemporalGraph", u: VertexId, v: VertexId) -> List[IncidentLabel]:
    """Every in-range label on edges incident to {u, v}, sorted (time, neighbor, common)."""
    bounds = multi_label_range(graph, u, v)
    if bounds is None:
        return []
    tmin, tmax = bounds

    candidates = [
        IncidentLabel(neighbor=neighbor, common=common, time=t)
        for neighbor, common, times in _incident_edges(graph, normalize_pair(u, v))
        for t in times
        if in_open_range(t, tmin, tmax)
    ]
    candidates.sort(key=lambda c: (c.time, c.neighbor, c.common))
    return candidates


def find_min_incident_in_range(graph: "TemporalGraph", u: VertexId, v: VertexId) -> Optional[IncidentLabel]:
    """
    Smallest in-range label on an edge incident to {u, v}.

    Returns (neighbor, common, time) where `common` is the endpoint shared
    with {u, v}. Ties on time go to the smaller neighbor, then the smaller
    common vertex. None if {u, v} is missing, has fewer than two labels, or
    no incident label lies strictly inside its range.
    """
    candidates = incident_labels_in_range(graph, u, v)
    return candidates[0] if candidates else None


# =============================================================================
# LABEL TRANSFER
# =============================================================================

def transfer_labels_through_edge(graph: "TemporalGraph", anchor: VertexId, pivot: VertexId) -> int:
    """
    Move labels from the pivot's edges onto the anchor's edges.

    With (tmin, tmax) the range of {anchor, pivot}: for every neighbor w of
    `pivot` other than `anchor`, each label of {pivot, w} strictly inside
    the range is removed there and added to {w, anchor}. Emptied edges are
    deleted; existing destination edges are merged into. {anchor, pivot}
    itself is never touched.

    Returns the number of labels moved (0 if {anchor, pivot} does not exist
    or is a self-loop).
    """
    if anchor == pivot:
        return 0

    bounds = graph.get_edge_time_range(anchor, pivot)
    if bounds is None:
        return 0
    tmin, tmax = bounds

    moved = 0
    for w in graph.get_all_neighbors(pivot):
        # a self-loop at pivot would land on {anchor, pivot}
        if w == anchor or w == pivot:
            continue

        to_move = get_edge_timestamps_in_range(graph, pivot, w, tmin, tmax)
        if not to_move:
            continue

        for t in to_move:
            graph.remove_edge_timestamp(pivot, w, t)
        for t in to_move:
            graph.add_edge(w, anchor, t)

        moved += len(to_move)

    return moved
