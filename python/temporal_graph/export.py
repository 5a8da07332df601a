"""
export.py — DOT and Text Views of a Temporal Graph

  to_dot:          all edges, labelled with their timestamps
  to_dot_at_time:  snapshot with the edges active at one timestamp
  to_summary:      plain-text state dump

DOT sources are built with the `graphviz` package; PNG rendering runs the
Graphviz `dot` executable through it.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Sequence, Union

import graphviz

from .graph import TemporalGraph
from .types import TimeStep

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

GRAPH_NAME = "temporal_graph"

# Above this many labels an edge shows its range instead of the full list
MAX_LISTED_LABELS = 5


class RenderError(RuntimeError):
    """Raised when Graphviz is missing or fails to render."""
    pass


def format_edge_label(times: Sequence[TimeStep]) -> str:
    if len(times) <= MAX_LISTED_LABELS:
        return ", ".join(str(t) for t in times)
    return f"{times[0]}..{times[-1]} ({len(times)} times)"


# =============================================================================
# GRAPHVIZ OBJECTS
# =============================================================================

def _base_graph(graph: TemporalGraph, node_attr: dict) -> graphviz.Graph:
    dot = graphviz.Graph(GRAPH_NAME, strict=True, node_attr=node_attr)
    for vertex in graph.vertices():
        dot.node(str(vertex))
    return dot


def labelled_graph(graph: TemporalGraph) -> graphviz.Graph:
    dot = _base_graph(graph, {"shape": "circle", "style": "filled", "fillcolor": "lightblue"})
    for (u, v), times in graph.iter_edges():
        dot.edge(str(u), str(v), label=format_edge_label(times))
    return dot


def snapshot_graph(graph: TemporalGraph, time: TimeStep) -> graphviz.Graph:
    dot = _base_graph(graph, {"shape": "circle"})
    for u, v in graph.edges_at_time(time):
        dot.edge(str(u), str(v))
    return dot


def to_dot(graph: TemporalGraph) -> str:
    return labelled_graph(graph).source


def to_dot_at_time(graph: TemporalGraph, time: TimeStep) -> str:
    return snapshot_graph(graph, time).source


def to_summary(graph: TemporalGraph) -> str:
    lines = ["Graph State:"]
    if graph.edge_count() == 0:
        lines.append("  (no edges)")
    for (u, v), times in graph.iter_edges():
        lines.append(f"    {u} -- {v} : [{', '.join(str(t) for t in times)}]")
    return "\n".join(lines)


# =============================================================================
# FILES
# =============================================================================

def render_png(dot: graphviz.Graph, dot_path: PathLike, output: PathLike) -> Path:
    """Render `dot` (source kept at `dot_path`) to a PNG at `output`."""
    try:
        rendered = dot.render(filename=str(dot_path), outfile=str(output), format="png")
    except graphviz.ExecutableNotFound as e:
        raise RenderError(f"Graphviz executable not found: {e}")
    except graphviz.CalledProcessError as e:
        stderr = e.stderr.decode("utf-8", errors="replace").strip() if isinstance(e.stderr, bytes) else e.stderr
        raise RenderError(f"dot failed with status {e.returncode}: {stderr}")
    return Path(rendered)


def _save(dot: graphviz.Graph, prefix: PathLike, render: bool) -> Path:
    prefix = Path(prefix)
    prefix.parent.mkdir(parents=True, exist_ok=True)

    dot_path = prefix.with_name(prefix.name + ".dot")
    dot.save(filename=str(dot_path))

    if not render:
        return dot_path
    png_path = render_png(dot, dot_path, prefix.with_name(prefix.name + ".png"))
    logger.info("Saved visualization to %s", png_path)
    return png_path


def save_with_labels(graph: TemporalGraph, prefix: PathLike, render: bool = True) -> Path:
    """Write <prefix>.dot and, if `render`, <prefix>.png. Returns the last file written."""
    return _save(labelled_graph(graph), prefix, render)


def save_snapshot(graph: TemporalGraph, time: TimeStep, prefix: PathLike, render: bool = True) -> Path:
    return _save(snapshot_graph(graph, time), prefix, render)


def save_timeline_panels(graph: TemporalGraph, prefix: PathLike, render: bool = True) -> int:
    """One snapshot per distinct timestamp, named <prefix>_<t>. Returns the panel count."""
    prefix = Path(prefix)
    count = 0
    for t in graph.timestamps():
        save_snapshot(graph, t, prefix.with_name(f"{prefix.name}_{t}"), render)
        count += 1
    logger.info("Generated %d timeline panels", count)
    return count
